"""JSON-RPC parameter coercion and JSON views of transactions and headers."""