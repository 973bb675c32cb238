"""Key-value storage for chain data: in-memory and SQLite-backed."""