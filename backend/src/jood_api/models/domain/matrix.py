"""Permission matrix domain models."""

from uuid import UUID

from pydantic import BaseModel


class MatrixUser(BaseModel):
    """Profile owner shown on a matrix row."""

    id: UUID
    name: str
    email: str
    roles: list[str] = []  # Account-level legacy role tags


class MatrixColumn(BaseModel):
    """Permission column of the matrix."""

    id: UUID
    name: str
    category: str
    priority: int


class MatrixCell(BaseModel):
    """Single profile x permission cell."""

    has: bool
    sources: list[str] = []


class MatrixRow(BaseModel):
    """Matrix row for one profile."""

    profile_id: UUID
    user: MatrixUser
    cells: list[MatrixCell]
    permission_sources: dict[str, int]


class PermissionMatrix(BaseModel):
    """All profiles x permissions grid."""

    columns: list[MatrixColumn]
    rows: list[MatrixRow]

    def cell(self, profile_id: UUID, permission_name: str) -> MatrixCell:
        """Look up a cell by profile and permission name.

        Raises:
            KeyError: If the profile or permission is not in the grid
        """
        column_index = next(
            (i for i, column in enumerate(self.columns) if column.name == permission_name),
            None,
        )
        if column_index is None:
            raise KeyError(permission_name)
        for row in self.rows:
            if row.profile_id == profile_id:
                return row.cells[column_index]
        raise KeyError(str(profile_id))


class RoleMatrixColumn(BaseModel):
    """Role column of the role matrix."""

    id: UUID
    name: str
    permission_count: int


class RoleMatrixRow(BaseModel):
    """Role matrix row for one profile."""

    profile_id: UUID
    user: MatrixUser
    cells: list[bool]


class RoleMatrix(BaseModel):
    """All profiles x roles grid."""

    columns: list[RoleMatrixColumn]
    rows: list[RoleMatrixRow]
