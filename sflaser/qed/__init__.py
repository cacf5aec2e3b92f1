from os import getenv, path

# read rate tables from a file generated by `sflaser.qed.tables.table_gen`
# instead of computing them at import
_table_file = None
if getenv("SFLASER_TABLES"):
    _table_file = getenv("SFLASER_TABLES")
    if path.exists(_table_file):
        print(f"Using rate tables from {_table_file}.")
    else:
        print(f"{_table_file} not found, computing rate tables.")
        _table_file = None
