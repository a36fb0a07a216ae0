"""FastAPI server for Mis Compras."""
