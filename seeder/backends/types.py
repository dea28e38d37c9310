"""
Field type -> backend column type mapping
"""

from ..exceptions import UnsupportedBackendError


class PostgresDataTypes:
    INTEGER = "integer"
    REAL = "real"
    MONEY = "money"
    VARCHAR = "varchar"
    BOOLEAN = "boolean"
    TIMESTAMP_WITH_TIMEZONE = "timestamp with time zone"
    DATE = "date"


INTEGER_TYPES = {'sequence', 'random_int', 'random_digit', 'port_number'}
FLOAT_TYPES = {'pyfloat', 'latitude', 'longitude'}
LONG_TEXT_TYPES = {'paragraph', 'text'}
DATETIME_TYPES = {'date_time', 'past_datetime', 'future_datetime', 'date_time_this_year'}
DATE_TYPES = {'date'}
BOOLEAN_TYPES = {'boolean'}


def _postgres(field_type: str) -> str:
    if field_type in INTEGER_TYPES:
        return PostgresDataTypes.INTEGER
    if field_type in FLOAT_TYPES:
        return PostgresDataTypes.REAL
    if field_type == 'price':
        return PostgresDataTypes.MONEY
    if field_type in LONG_TEXT_TYPES:
        return f"{PostgresDataTypes.VARCHAR}(512)"
    if field_type in DATETIME_TYPES:
        return PostgresDataTypes.TIMESTAMP_WITH_TIMEZONE
    if field_type in DATE_TYPES:
        return PostgresDataTypes.DATE
    if field_type in BOOLEAN_TYPES:
        return PostgresDataTypes.BOOLEAN
    return f"{PostgresDataTypes.VARCHAR}(256)"


def _mysql(field_type: str) -> str:
    if field_type in INTEGER_TYPES:
        return "integer"
    if field_type in FLOAT_TYPES or field_type == 'price':
        return "real"
    if field_type in LONG_TEXT_TYPES:
        return "varchar(512)"
    if field_type in DATETIME_TYPES:
        return "timestamp"
    if field_type in DATE_TYPES:
        return "date"
    if field_type in BOOLEAN_TYPES:
        return "boolean"
    return "varchar(256)"


def _sqlite(field_type: str) -> str:
    if field_type in INTEGER_TYPES or field_type in BOOLEAN_TYPES:
        return "INTEGER"
    if field_type in FLOAT_TYPES or field_type == 'price':
        return "REAL"
    return "TEXT"


TYPE_MAPPERS = {
    'postgres': _postgres,
    'mysql': _mysql,
    'mysql2': _mysql,
    'sqlite': _sqlite,
    'memory': _sqlite,
}


def map_field_type_to_backend_type(field_type: str, client: str) -> str:
    """
    Map a semantic field type to the column type of a backend

    Args:
        field_type: Field type name (e.g. 'sequence', 'email')
        client: Backend client name

    Returns:
        Column type; unrecognized field types fall back to a string type

    Raises:
        UnsupportedBackendError: if the client is unknown
    """
    mapper = TYPE_MAPPERS.get(client)
    if mapper is None:
        raise UnsupportedBackendError(client)
    return mapper(field_type)
