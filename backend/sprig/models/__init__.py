from sprig.models.base import Entity  # noqa: F401
from sprig.models.schema import ColumnDescriptor, columns_of  # noqa: F401
from sprig.models.user import User  # noqa: F401
