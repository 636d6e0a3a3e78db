# CSVQuery Catalog Package
# ========================
# Owns the working Dataset and its indexes; executes structured queries.

from catalog.index_catalog import (
    IndexCatalog, IndexRole, OPERATOR_ROLES, UnsupportedOperatorError,
    build_catalog, project_rows,
)
