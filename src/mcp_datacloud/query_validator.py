"""Data Cloud SQL query validator."""
import re
from typing import Tuple, Optional

class QueryValidator:
    # Statements that change data or schema
    FORBIDDEN_OPERATIONS = [
        'INSERT', 'UPDATE', 'DELETE', 'UPSERT', 'MERGE', 'CREATE',
        'ALTER', 'DROP', 'TRUNCATE', 'GRANT', 'REVOKE'
    ]

    @staticmethod
    def validate_query(sql: str) -> Tuple[bool, Optional[str]]:
        """
        Validate a raw Data Cloud SQL query against read-only rules.
        Returns (is_valid, error_message)
        """
        if not sql or not sql.strip():
            return False, "Query must not be empty"

        sql_upper = sql.upper().strip()

        if not (sql_upper.startswith('SELECT') or sql_upper.startswith('WITH')):
            return False, "Only SELECT queries are allowed. DML and DDL statements are not permitted."

        # Word boundaries so column names like UpdatedAt__c still pass
        for operation in QueryValidator.FORBIDDEN_OPERATIONS:
            if re.search(rf'\b{operation}\b', sql_upper):
                return False, f"{operation} operations are not permitted. Only SELECT queries are allowed."

        # A trailing semicolon is fine, a second statement is not
        if re.search(r';\s*\S', sql):
            return False, "Multiple SQL statements are not allowed"

        return True, None
