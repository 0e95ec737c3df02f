"""Schema migration for modelspine.

Manifesto:
    Schemas are derived from model descriptors, so migration is a
    function of the registry: create what is missing, in an order the
    database accepts, and never drop anything.  Running it twice issues
    no DDL the second time.

Modules
-------
runner    Migrator with migrate() / add_column(), dependency_order()

Tags:
    modelspine, migrations, schema, database, idempotent, DDL
"""

from modelspine.core.migrations.runner import MigrationResult, Migrator, dependency_order

__all__ = ["Migrator", "MigrationResult", "dependency_order"]
