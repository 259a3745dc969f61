"""Generation hooks for customizing generated files.

Post-generation hooks receive each rendered file before it is validated and
written, and may transform its content.

Example usage:
    from gql_nsgen.core.hooks import HookRunner, AddHeaderHook

    runner = HookRunner()
    runner.add_post_hook(AddHeaderHook("Auto-generated - do not edit"))
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class PostGenerateHook(Protocol):
    """Protocol for post-generation hooks.

    Example:
        class StripTrailingWhitespace:
            def post_generate(self, filename: str, content: str) -> str:
                return "\\n".join(line.rstrip() for line in content.splitlines()) + "\\n"
    """

    def post_generate(self, filename: str, content: str) -> str:
        """Called after rendering for each file.

        Args:
            filename: Path of the file relative to the output directory
                (e.g., "generated_client/models.py")
            content: The rendered content

        Returns:
            The (possibly transformed) content to write
        """
        ...


class AddHeaderHook:
    """Built-in hook to add a header to generated files.

    Lines are written as comments in ``.py`` and ``.toml`` files; other files
    are left unchanged.

    Example:
        hook = AddHeaderHook("Auto-generated - do not edit")
    """

    def __init__(self, header: str):
        self.header = header

    def post_generate(self, filename: str, content: str) -> str:
        if not filename.endswith((".py", ".toml")):
            return content
        lines = [line if line.startswith("#") else f"# {line}".rstrip() for line in self.header.splitlines()]
        return "\n".join(lines) + "\n\n" + content


class HookRunner:
    """Runs a collection of hooks in order."""

    def __init__(self):
        self.post_hooks: list[PostGenerateHook] = []

    def add_post_hook(self, hook: PostGenerateHook):
        """Add a post-generation hook."""
        self.post_hooks.append(hook)

    def run_post_hooks(self, filename: str, content: str) -> str:
        """Run all post-generation hooks in order."""
        for hook in self.post_hooks:
            content = hook.post_generate(filename, content)
        return content
