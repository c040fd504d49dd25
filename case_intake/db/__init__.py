"""Store protocols and their psycopg2 / in-memory implementations."""
