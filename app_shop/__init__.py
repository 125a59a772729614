# ==============================================================================
# APP SHOP - Núcleo de datos y reportes de la tienda
# ==============================================================================
# Capas:
#   models/        → Entidades (Customer, Product, Employee, Receipt) y reportes
#   repositories/  → Gateways remotos, datos locales, archivos JSON
#   services/      → EntityStore, búsqueda, reportes, DataFacade
#   main.py        → API JSON (Flask)
# ==============================================================================

__version__ = '1.0.0'
