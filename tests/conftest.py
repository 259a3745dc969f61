"""Shared schema fixtures."""

import pytest

from gql_nsgen.core.accessors import AccessorGenerator
from gql_nsgen.core.grouping import group_models
from gql_nsgen.core.parser import parse_schema

# One model, a connection-shaped list query and no mutations
MINIMAL_SCHEMA = """
type ProcurementContract {
  id: ID!
  name: String
}

type ProcurementContractEdge {
  node: ProcurementContract
}

type ProcurementContractConnection {
  edges: [ProcurementContractEdge]
}

type Query {
  procurementContracts(id: ID, name: String): ProcurementContractConnection
}
"""

# Offset-paginated models with mutations, plus one cursor-paginated root model
INFRAHUB_SCHEMA = '''
scalar DateTime
scalar GenericScalar

"""Lifecycle of a contract"""
enum ContractStatus {
  DRAFT
  ACTIVE
  CLOSED
}

type TextAttribute {
  value: String
  updated_at: DateTime
}

interface CoreNode {
  id: String!
}

"""A signed procurement agreement"""
type ProcurementContract implements CoreNode {
  id: String!
  display_label: String
  name: TextAttribute
  status: ContractStatus
  vendor: ProcurementVendor
}

type ProcurementVendor implements CoreNode {
  id: String!
  name: TextAttribute
  contracts: PaginatedProcurementContract
}

type EdgedProcurementContract {
  node: ProcurementContract
}

type PaginatedProcurementContract {
  count: Int!
  edges: [EdgedProcurementContract!]!
}

type EdgedProcurementVendor {
  node: ProcurementVendor
}

type PaginatedProcurementVendor {
  count: Int!
  edges: [EdgedProcurementVendor!]!
}

type BuiltinTag {
  id: String!
  name: TextAttribute
  description: TextAttribute
}

type EdgedBuiltinTag {
  node: BuiltinTag
}

type PaginatedBuiltinTag {
  count: Int!
  edges: [EdgedBuiltinTag!]!
}

type Tag {
  id: ID!
  label: String
  meta: GenericScalar
}

type PageInfo {
  hasNextPage: Boolean!
  endCursor: String
}

type TagEdge {
  cursor: String!
  node: Tag!
}

type TagConnection {
  pageInfo: PageInfo!
  edges: [TagEdge!]!
}

input TextAttributeCreate {
  value: String
}

input ProcurementContractCreateInput {
  name: TextAttributeCreate!
  status: ContractStatus
  description: String
}

input ProcurementContractUpdateInput {
  id: String!
  name: TextAttributeCreate
}

input DeleteInput {
  id: String
}

input ContextInput {
  account: String
}

type ProcurementContractCreate {
  ok: Boolean
  object: ProcurementContract
}

type ProcurementContractUpdate {
  ok: Boolean
  object: ProcurementContract
}

type ProcurementContractDelete {
  ok: Boolean
}

type Query {
  ProcurementContract(offset: Int, limit: Int, ids: [ID], name__value: String, status__value: String): PaginatedProcurementContract!
  ProcurementVendor(offset: Int, limit: Int, ids: [ID]): PaginatedProcurementVendor!
  BuiltinTag(offset: Int, limit: Int, ids: [ID]): PaginatedBuiltinTag!
  tags(first: Int, after: String, label: String): TagConnection!
}

type Mutation {
  ProcurementContractCreate(context: ContextInput, data: ProcurementContractCreateInput!): ProcurementContractCreate
  ProcurementContractUpdate(data: ProcurementContractUpdateInput!): ProcurementContractUpdate
  ProcurementContractDelete(data: DeleteInput!): ProcurementContractDelete
  ProcurementVendorCreate(data: [String]): ProcurementContractCreate
}
'''


@pytest.fixture
def minimal_schema_text():
    return MINIMAL_SCHEMA


@pytest.fixture
def infrahub_schema_text():
    return INFRAHUB_SCHEMA


@pytest.fixture
def infrahub_schema():
    return parse_schema(INFRAHUB_SCHEMA)


@pytest.fixture
def infrahub_tree(infrahub_schema):
    return AccessorGenerator(infrahub_schema).build(group_models(infrahub_schema))


@pytest.fixture
def minimal_tree():
    schema = parse_schema(MINIMAL_SCHEMA)
    return AccessorGenerator(schema).build(group_models(schema))
