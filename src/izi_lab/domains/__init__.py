"""Domain modules: enums, records, tables and rule catalogs."""
