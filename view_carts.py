import os
import sys
from collections import defaultdict

from pymongo import MongoClient
from pymongo.errors import PyMongoError

MONGODB_URI = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
MONGODB_DB = os.getenv("MONGODB_DB", "shop")

try:
    client = MongoClient(MONGODB_URI, serverSelectionTimeoutMS=5000)
    # Raises if the server is not reachable within the selection timeout
    client.admin.command("ping")
except PyMongoError as e:
    print(f"❌ Failed to connect to MongoDB: {e}")
    print("Make sure MongoDB is running and MONGODB_URI is set")
    sys.exit(1)

try:
    carts = defaultdict(list)
    for item in client[MONGODB_DB]["cartitems"].find():
        carts[item.get("userId")].append(item)

    print(f"✅ Found {len(carts)} active carts:\n")

    if not carts:
        print("No carts found. Add items via the API first, e.g.:")
        print("\ncurl -X POST http://localhost:5000/api/cart \\")
        print('  -H "Content-Type: application/json" \\')
        print('  -d \'{"productId": "p1", "title": "Mug", "price": 12.5, "quantity": 1, "userId": "u1"}\'\n')
    else:
        for user_id, items in carts.items():
            total = sum((item.get("price") or 0) * item.get("quantity", 0) for item in items)
            print(f"👤 User: {user_id}")
            for item in items:
                print(f"🛒 {item.get('productId')} x{item.get('quantity')}  {item.get('title') or ''}")
            print(f"💰 Total: {total:.2f}")
            print("-" * 50)

except PyMongoError as e:
    print(f"❌ Error: {e}")
    sys.exit(1)
finally:
    client.close()
