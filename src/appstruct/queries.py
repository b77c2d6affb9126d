"""
GraphQL documents for the AppStruct API.

projectId is declared Float! by the backend, so callers send it as a float.
"""

LOGIN_MUTATION = """
mutation ($loginInput: LoginInput!) {
  login(loginInput: $loginInput) {
    access_token
    refresh_token
  }
}
"""

MY_PROJECTS_QUERY = """
query {
  myProjects {
    id
    projectName
  }
}
"""

BACKEND_TABLES_QUERY = """
query getBackendTables($projectId: Float!) {
  getBackendTables(projectId: $projectId)
}
"""

CREATE_TABLE_MUTATION = """
mutation createTable($projectId: Float!, $tableName: String!, $columns: [ColumnTypeInput!]!) {
  createTable(projectId: $projectId, tableName: $tableName, columns: $columns)
}
"""

TABLE_SCHEMA_QUERY = """
query getTableSchema($projectId: Float!, $tableName: String!) {
  getTableSchema(projectId: $projectId, tableName: $tableName) {
    name
    columns {
      name
      type
      isNullable
    }
  }
}
"""

DELETE_TABLE_MUTATION = """
mutation deleteTable($projectId: Float!, $tableName: String!) {
  deleteTable(projectId: $projectId, tableName: $tableName)
}
"""

TABLE_DATA_QUERY = """
query getTableData($projectId: Float!, $tableName: String!) {
  getTableData(projectId: $projectId, tableName: $tableName) {
    id
    data
  }
}
"""

INSERT_RECORD_MUTATION = """
mutation insertRecord($projectId: Float!, $tableName: String!, $data: JSONObject!) {
  insertRecord(projectId: $projectId, tableName: $tableName, data: $data)
}
"""

UPDATE_RECORD_MUTATION = """
mutation updateRecord($projectId: Float!, $tableName: String!, $id: String!, $data: JSONObject!) {
  updateRecord(projectId: $projectId, tableName: $tableName, id: $id, data: $data) {
    id
    data
  }
}
"""

DELETE_RECORD_MUTATION = """
mutation deleteRecord($projectId: Float!, $tableName: String!, $id: String!) {
  deleteRecord(projectId: $projectId, tableName: $tableName, id: $id)
}
"""

ADD_COLUMN_MUTATION = """
mutation addColumn($projectId: Float!, $tableName: String!, $column: ColumnTypeInput!) {
  addColumn(projectId: $projectId, tableName: $tableName, column: $column)
}
"""

DELETE_COLUMN_MUTATION = """
mutation deleteColumn($projectId: Float!, $tableName: String!, $columnName: String!) {
  deleteColumn(projectId: $projectId, tableName: $tableName, columnName: $columnName)
}
"""
