class DynTableError(Exception):
    """Base exception for all dyn_table errors"""
    pass

class ConfigError(DynTableError):
    """Invalid or inconsistent global.json or table config"""
    pass

class SchemaError(DynTableError):
    """
    Column definition cannot be turned into a ColumnSpec
    missing name, unknown style, wrong types, etc
    """
    pass
