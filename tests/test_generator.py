"""Tests for the code generator."""

import ast
import os
from pathlib import Path

import pytest

from gql_nsgen.core.accessors import AccessorGenerator
from gql_nsgen.core.errors import (
    InvalidGeneratedCodeError,
    NamespaceCollisionError,
    OutputWriteError,
    UnresolvedReferenceError,
)
from gql_nsgen.core.generator import CodeGenerator, attribute_name, safe_docstring, unique_name
from gql_nsgen.core.grouping import group_models
from gql_nsgen.core.hooks import AddHeaderHook, HookRunner
from gql_nsgen.core.parser import parse_schema
from gql_nsgen.core.pipeline import GenerationOptions, generate_client


def _tree(text):
    schema = parse_schema(text)
    return AccessorGenerator(schema).build(group_models(schema))


def _connection(type_name, query_name, arguments="(offset: Int, limit: Int, ids: [ID])"):
    return f"""
    type {type_name} {{ id: ID! }}
    type {type_name}Edge {{ node: {type_name} }}
    type {type_name}Connection {{ edges: [{type_name}Edge] }}
    extend type Query {{ {query_name}{arguments}: {type_name}Connection }}
    """


class TestRender:
    """Tests for in-memory rendering."""

    def test_file_set(self, infrahub_tree, tmp_path):
        files = CodeGenerator(infrahub_tree, str(tmp_path / "out")).render()
        assert sorted(files) == [
            "generated_client/__init__.py",
            "generated_client/api/__init__.py",
            "generated_client/api/builtin.py",
            "generated_client/api/generated.py",
            "generated_client/api/procurement.py",
            "generated_client/api/tag.py",
            "generated_client/models.py",
        ]

    def test_every_module_parses(self, infrahub_tree, tmp_path):
        files = CodeGenerator(infrahub_tree, str(tmp_path / "out")).render()
        for path, content in files.items():
            ast.parse(content, filename=path)

    def test_rendering_is_deterministic(self, infrahub_schema_text, tmp_path):
        first = CodeGenerator(_tree(infrahub_schema_text), str(tmp_path / "a")).render()
        second = CodeGenerator(_tree(infrahub_schema_text), str(tmp_path / "b")).render()
        assert first == second

    def test_namespace_module_contents(self, infrahub_tree, tmp_path):
        files = CodeGenerator(infrahub_tree, str(tmp_path / "out")).render()
        module = files["generated_client/api/procurement.py"]
        assert "class ProcurementContractClient:" in module
        assert "class ProcurementVendorClient:" in module
        assert "class ProcurementApi:" in module
        assert "self.contract = ProcurementContractClient(executor)" in module
        assert "self.vendor = ProcurementVendorClient(executor)" in module
        assert "async def get_by_id(self, id: str, *, request_branch: _Optional[str] = None)" in module
        assert "name__value: _Optional[str] = None" in module
        assert "page_size: _Optional[int] = 50" in module
        assert "async def create(self, *, name: _models.TextAttributeCreate," in module
        assert "async def delete(self, *, id: _Optional[str] = None," in module
        assert "ProcurementVendorCreate" not in module

    def test_root_model_is_namespace_base_class(self, infrahub_tree, tmp_path):
        files = CodeGenerator(infrahub_tree, str(tmp_path / "out")).render()
        module = files["generated_client/api/tag.py"]
        assert "class TagApi(TagClient):" in module
        assert "super().__init__(executor)" in module
        assert 'mode="cursor"' in module

    def test_root_api_lists_namespaces(self, infrahub_tree, tmp_path):
        files = CodeGenerator(infrahub_tree, str(tmp_path / "out")).render()
        api = files["generated_client/api/__init__.py"]
        assert "self.builtin = BuiltinApi(executor)" in api
        assert "self.procurement = ProcurementApi(executor)" in api
        assert "self.tag = TagApi(executor)" in api
        assert "self.generated = GeneratedClient(executor)" in api
        assert "self.text" not in api
        assert "generated_client/api/text.py" not in files

    def test_generated_client_has_every_root_field(self, infrahub_tree, tmp_path):
        files = CodeGenerator(infrahub_tree, str(tmp_path / "out")).render()
        module = files["generated_client/api/generated.py"]
        for name in (
            "procurement_contract",
            "procurement_vendor",
            "builtin_tag",
            "tags",
            "procurement_contract_create",
            "procurement_contract_update",
            "procurement_contract_delete",
            "procurement_vendor_create",
        ):
            assert f"    async def {name}(self, *," in module
        assert (
            "async def procurement_vendor_create(self, *, data: _Optional[_List[_Optional[str]]] = None, "
            "request_branch: _Optional[str] = None) -> _Optional[_models.ProcurementContractCreate]:"
        ) in module
        assert (
            "context: _Optional[_models.ContextInput] = None, data: _models.ProcurementContractCreateInput,"
        ) in module
        assert "-> _models.PaginatedProcurementContract:" in module
        assert "mutation ProcurementVendorCreate($data: [String]) {" in module

    def test_generated_client_method_names_are_unique(self, tmp_path):
        tree = _tree("type Query { tagList: Int tag_list: Int }")
        module = CodeGenerator(tree, str(tmp_path)).render()["generated_client/api/generated.py"]
        assert "async def tag_list(self, *, request_branch: _Optional[str] = None) -> _Optional[int]:" in module
        assert "async def tag_list_2(self, *, request_branch: _Optional[str] = None) -> _Optional[int]:" in module
        assert "_TAG_LIST_2_DOCUMENT" in module

    def test_models_module(self, infrahub_tree, tmp_path):
        models = CodeGenerator(infrahub_tree, str(tmp_path / "out")).render()["generated_client/models.py"]
        assert "import datetime as _datetime" in models
        assert "class ContractStatus(str, _Enum):" in models
        assert 'DRAFT = "DRAFT"' in models
        assert 'name: TextAttributeCreate = _Field(alias="name")' in models
        assert 'updated_at: _Optional[_datetime.datetime] = _Field(default=None, alias="updated_at")' in models
        assert 'has_next_page: _Optional[bool] = _Field(default=None, alias="hasNextPage")' in models
        assert "meta: _Optional[_Any]" in models
        assert '"""A signed procurement agreement"""' in models

    def test_unbounded_paginator_has_no_page_size(self, minimal_tree, tmp_path):
        module = CodeGenerator(minimal_tree, str(tmp_path / "out")).render()["generated_client/api/procurement.py"]
        assert "page_size: _Optional[int]" not in module
        assert "page_size=None," in module

    def test_cursor_paginator_without_size_argument_has_no_page_size(self, tmp_path):
        tree = _tree(
            """
            type PageInfo { hasNextPage: Boolean! endCursor: String }
            type Note { id: ID! }
            type NoteEdge { cursor: String! node: Note }
            type NoteConnection { pageInfo: PageInfo! edges: [NoteEdge] }
            type Query { notes(after: String): NoteConnection }
            """
        )
        module = CodeGenerator(tree, str(tmp_path)).render()["generated_client/api/note.py"]
        assert 'mode="cursor"' in module
        assert "page_size: _Optional[int]" not in module
        assert "page_size=None," in module
        assert '_variables["after"] = _request.cursor' in module

    def test_page_size_default_is_configurable(self, infrahub_tree, tmp_path):
        files = CodeGenerator(infrahub_tree, str(tmp_path / "out"), default_page_size=200).render()
        assert "page_size: _Optional[int] = 200" in files["generated_client/api/procurement.py"]

    def test_pyproject_only_with_project_name(self, infrahub_tree, tmp_path):
        assert "pyproject.toml" not in CodeGenerator(infrahub_tree, str(tmp_path)).render()
        files = CodeGenerator(
            infrahub_tree,
            str(tmp_path),
            "infra_client",
            project_name="infra-client",
            runtime_requirement="gql-nsgen>=0.1",
        ).render()
        assert 'name = "infra-client"' in files["pyproject.toml"]
        assert '"gql-nsgen>=0.1",' in files["pyproject.toml"]
        assert 'packages = ["infra_client", "infra_client.api"]' in files["pyproject.toml"]

    def test_hooks_run_before_validation(self, infrahub_tree, tmp_path):
        hooks = HookRunner()
        hooks.add_post_hook(AddHeaderHook("Generated code\nDo not edit"))
        files = CodeGenerator(infrahub_tree, str(tmp_path), hooks=hooks).render()
        for content in files.values():
            assert content.startswith("# Generated code\n# Do not edit\n\n")


class TestNameSafety:
    """Tests for generated identifiers."""

    def test_attribute_name(self):
        assert attribute_name("displayLabel") == "display_label"
        assert attribute_name("class") == "class_"
        assert attribute_name("json") == "json_"
        assert attribute_name("model_config") == "model_config_"
        assert attribute_name("int") == "int_"

    def test_unique_name(self):
        taken = {"page_size"}
        assert unique_name("page_size", taken) == "page_size_2"
        assert unique_name("page_size", taken) == "page_size_3"
        assert unique_name("limit", taken) == "limit"

    def test_safe_docstring(self):
        assert safe_docstring('Say """hi"""') == 'Say \\"\\"\\"hi\\"\\"\\"'
        assert safe_docstring('ends with "quote"') == 'ends with "quote" '

    def test_reserved_parameter_names_are_renamed(self, tmp_path):
        tree = _tree("type Query { _unused: Int }" + _connection("Thing", "things", "(page_size: Int, request_branch: String, self: String)"))
        module = CodeGenerator(tree, str(tmp_path)).render()["generated_client/api/thing.py"]
        assert "page_size_2: _Optional[int] = None" in module
        assert "request_branch_2: _Optional[str] = None" in module
        assert "self_2: _Optional[str] = None" in module
        assert '"page_size": page_size_2,' in module

    def test_enum_members_and_fields(self, tmp_path):
        tree = _tree(
            """
            enum Kind { name value REGULAR }
            type Query { _unused: Int }
            type Thing { json: String model_config: String kind: Kind }
            """
        )
        models = CodeGenerator(tree, str(tmp_path)).render()["generated_client/models.py"]
        assert 'name_ = "name"' in models
        assert 'value_ = "value"' in models
        assert 'json_: _Optional[str] = _Field(default=None, alias="json")' in models
        assert 'model_config_: _Optional[str] = _Field(default=None, alias="model_config")' in models


class TestCollisions:
    """Tests for NamespaceCollisionError."""

    def test_case_variants_with_same_model_name(self, tmp_path):
        tree = _tree(
            "type Query { _unused: Int }"
            + _connection("IPAMPrefix", "ipamPrefixes")
            + _connection("IpamPrefix", "otherPrefixes")
        )
        with pytest.raises(NamespaceCollisionError) as exc_info:
            CodeGenerator(tree, str(tmp_path)).render()
        assert exc_info.value.namespace == "ipam"
        assert exc_info.value.name == "prefix"

    def test_model_attribute_shadowing_root_method(self, tmp_path):
        tree = _tree(
            "type Query { _unused: Int }"
            + _connection("Ipam", "ipams")
            + _connection("IpamList", "ipamLists")
        )
        with pytest.raises(NamespaceCollisionError) as exc_info:
            CodeGenerator(tree, str(tmp_path)).render()
        assert exc_info.value.name == "list"

    def test_namespace_named_like_generated_module(self, tmp_path):
        tree = _tree("type Query { _unused: Int }" + _connection("GeneratedReport", "reports"))
        with pytest.raises(NamespaceCollisionError) as exc_info:
            CodeGenerator(tree, str(tmp_path)).render()
        assert exc_info.value.name == "generated"
        assert exc_info.value.first == "GeneratedClient"

    def test_collision_writes_nothing(self, tmp_path):
        schema_text = "type Query { _unused: Int }" + _connection("IPAMPrefix", "a") + _connection("IpamPrefix", "b")
        output = tmp_path / "out"
        with pytest.raises(NamespaceCollisionError):
            generate_client(schema_text, GenerationOptions(output_dir=output))
        assert not output.exists()


class TestWrite:
    """Tests for writing the output tree."""

    def test_generate_writes_files(self, infrahub_schema_text, tmp_path):
        output = tmp_path / "client"
        report = generate_client(infrahub_schema_text, GenerationOptions(output_dir=output, project_name="infra-client"))
        assert (output / "pyproject.toml").is_file()
        assert (output / "generated_client" / "api" / "procurement.py").is_file()
        assert report.namespaces == 3
        assert report.models == 4
        assert len(report.warnings) == 1

    def test_regeneration_is_byte_identical(self, infrahub_schema_text, tmp_path):
        output = tmp_path / "client"
        options = GenerationOptions(output_dir=output)
        generate_client(infrahub_schema_text, options)
        first = {p.relative_to(output): p.read_bytes() for p in output.rglob("*") if p.is_file()}
        generate_client(infrahub_schema_text, options)
        second = {p.relative_to(output): p.read_bytes() for p in output.rglob("*") if p.is_file()}
        assert first == second

    def test_existing_output_keeps_unrelated_files(self, infrahub_schema_text, tmp_path):
        output = tmp_path / "client"
        (output / "generated_client").mkdir(parents=True)
        (output / "README.md").write_text("keep me")
        (output / "generated_client" / "stale.py").write_text("x = 1\n")

        generate_client(infrahub_schema_text, GenerationOptions(output_dir=output))

        assert (output / "README.md").read_text() == "keep me"
        assert not (output / "generated_client" / "stale.py").exists()
        assert (output / "generated_client" / "models.py").is_file()
        assert [p.name for p in tmp_path.iterdir()] == ["client"]

    def test_failed_swap_restores_previous_output(self, infrahub_schema_text, tmp_path, monkeypatch):
        output = tmp_path / "client"
        (output / "generated_client").mkdir(parents=True)
        (output / "generated_client" / "models.py").write_text("old models\n")
        (output / "pyproject.toml").write_text("old project\n")

        real_replace = os.replace

        def replace(src, dst):
            # Moving the new pyproject.toml into place fails
            if Path(src).name == "pyproject.toml" and Path(src).parent.name == "build":
                raise OSError("No space left on device")
            real_replace(src, dst)

        monkeypatch.setattr(os, "replace", replace)
        with pytest.raises(OutputWriteError, match="No space left"):
            generate_client(infrahub_schema_text, GenerationOptions(output_dir=output, project_name="infra-client"))

        assert (output / "generated_client" / "models.py").read_text() == "old models\n"
        assert not (output / "generated_client" / "api").exists()
        assert (output / "pyproject.toml").read_text() == "old project\n"
        assert [p.name for p in tmp_path.iterdir()] == ["client"]

    def test_schema_error_writes_nothing(self, tmp_path):
        output = tmp_path / "client"
        with pytest.raises(UnresolvedReferenceError):
            generate_client("type Thing { owner: Person }", GenerationOptions(output_dir=output))
        assert not output.exists()

    def test_invalid_template_output_writes_nothing(self, infrahub_schema_text, tmp_path):
        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "package_init.py.j2").write_text("def broken(:\n")
        output = tmp_path / "client"
        with pytest.raises(InvalidGeneratedCodeError) as exc_info:
            generate_client(infrahub_schema_text, GenerationOptions(output_dir=output, template_dir=templates))
        assert exc_info.value.path == "generated_client/__init__.py"
        assert not output.exists()

    def test_template_override(self, infrahub_schema_text, tmp_path):
        templates = tmp_path / "templates"
        templates.mkdir()
        (templates / "package_init.py.j2").write_text('"""{{ package }} (custom)."""\n')
        output = tmp_path / "client"
        generate_client(infrahub_schema_text, GenerationOptions(output_dir=output, template_dir=templates))
        assert (output / "generated_client" / "__init__.py").read_text() == '"""generated_client (custom)."""\n'

    def test_header_option(self, infrahub_schema_text, tmp_path):
        output = tmp_path / "client"
        generate_client(infrahub_schema_text, GenerationOptions(output_dir=output, header="Do not edit"))
        assert (output / "generated_client" / "models.py").read_text().startswith("# Do not edit\n\n")


class TestGenerationOptions:
    """Tests for GenerationOptions."""

    def test_package_name_is_normalised(self, tmp_path):
        assert GenerationOptions(output_dir=tmp_path, package_name="InfraClient").package_name == "infra_client"

    def test_runtime_requirement(self, tmp_path):
        assert GenerationOptions(output_dir=tmp_path).runtime_requirement == "gql-nsgen"
        options = GenerationOptions(output_dir=tmp_path, runtime_path=tmp_path)
        assert options.runtime_requirement.startswith("gql-nsgen @ file://")

    def test_invalid_page_size(self, tmp_path):
        with pytest.raises(ValueError):
            GenerationOptions(output_dir=tmp_path, default_page_size=0)

    def test_unknown_option(self, tmp_path):
        with pytest.raises(ValueError):
            GenerationOptions(output_dir=tmp_path, retries=3)
