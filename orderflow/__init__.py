"""
orderflow: order-management microservices.

Five FastAPI services (auth, contact, inventory, sales, purchase) that
coordinate through REST calls and Redis pub/sub events.
"""
