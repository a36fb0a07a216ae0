"""HTTP API of the Mis Compras server."""
