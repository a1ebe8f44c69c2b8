# Overview: Default records written into absent collections by `flask storage init`.

from __future__ import annotations

from datetime import timedelta

from ..time_utils import to_utc_z, utcnow


def _ago(**kwargs) -> str:
    return to_utc_z(utcnow() - timedelta(**kwargs))


def _now() -> str:
    return to_utc_z(utcnow())


# id, title, description, price, discount, category, subcategory, gender, brand,
# colors, sizes, stock, rating, reviews, tags, specifications, created (days, hours, minutes ago)
_PRODUCT_ROWS = [
    ("PROD-001", "iPhone 15 Pro Max", "Latest iPhone with advanced camera system and A17 Pro chip",
     1199, 10, "Electronics", "Smartphones", "Unisex", "Apple",
     ["#000000", "#FFFFFF", "#FFD700"], ["128GB", "256GB", "512GB", "1TB"], 50, 4.8, 1250,
     ["smartphone", "apple", "premium", "camera"],
     {"display": "6.7-inch Super Retina XDR", "processor": "A17 Pro", "battery": "Up to 29 hours video playback"},
     (5, 2, 30)),
    ("PROD-002", "Samsung Galaxy S24 Ultra", "Premium Android smartphone with S Pen and advanced AI features",
     1299, 15, "Electronics", "Smartphones", "Unisex", "Samsung",
     ["#000000", "#C0C0C0", "#696969"], ["256GB", "512GB", "1TB"], 35, 4.7, 980,
     ["smartphone", "samsung", "android", "s-pen"],
     {"display": "6.8-inch Dynamic AMOLED 2X", "processor": "Snapdragon 8 Gen 3", "battery": "5000mAh"},
     (3, 8, 15)),
    ("PROD-003", "MacBook Pro 16-inch", "Professional laptop with M3 Pro chip for creators and developers",
     2499, 5, "Electronics", "Laptops", "Unisex", "Apple",
     ["#C0C0C0", "#696969"], ["512GB", "1TB", "2TB", "4TB"], 20, 4.9, 650,
     ["laptop", "macbook", "professional", "m3-pro"],
     {"display": "16.2-inch Liquid Retina XDR", "processor": "M3 Pro", "memory": "18GB Unified Memory"},
     (7, 4, 45)),
    ("PROD-004", "Nike Air Max 270", "Comfortable running shoes with Max Air cushioning",
     150, 20, "Fashion", "Shoes", "Men", "Nike",
     ["#000000", "#FFFFFF", "#FF0000"], ["7", "8", "9", "10", "11", "12"], 100, 4.5, 2100,
     ["shoes", "nike", "running", "comfortable"],
     {"material": "Mesh and synthetic upper", "sole": "Rubber outsole with Max Air unit"},
     (2, 6, 20)),
    ("PROD-005", "Adidas Ultraboost 22", "Premium running shoes with Boost midsole technology",
     180, 25, "Fashion", "Shoes", "Women", "Adidas",
     ["#FFFFFF", "#FF69B4", "#0000FF"], ["5", "6", "7", "8", "9", "10"], 75, 4.6, 1800,
     ["shoes", "adidas", "running", "boost"],
     {"material": "Primeknit+ upper", "sole": "Boost midsole with Continental rubber outsole"},
     (4, 3, 10)),
    ("PROD-006", "Sony WH-1000XM5", "Industry-leading noise canceling wireless headphones",
     399, 10, "Electronics", "Audio", "Unisex", "Sony",
     ["#000000", "#C0C0C0"], ["One Size"], 40, 4.8, 3200,
     ["headphones", "sony", "noise-canceling", "wireless"],
     {"driver": "30mm dynamic drivers", "battery": "Up to 30 hours playback"},
     (1, 5, 30)),
    ("PROD-007", "Levi's 501 Original Jeans", "Classic straight-fit jeans in authentic denim",
     89, 15, "Fashion", "Clothing", "Men", "Levi's",
     ["#0000FF", "#000000", "#87CEEB"], ["28", "30", "32", "34", "36", "38", "40"], 200, 4.4, 1500,
     ["jeans", "levis", "classic", "denim"],
     {"material": "100% Cotton denim", "fit": "Straight fit"},
     (6, 1, 45)),
    ("PROD-008", "Zara Blazer", "Elegant blazer perfect for office and formal occasions",
     79, 30, "Fashion", "Clothing", "Women", "Zara",
     ["#000000", "#000080", "#808080"], ["XS", "S", "M", "L", "XL"], 60, 4.3, 890,
     ["blazer", "zara", "formal", "office"],
     {"material": "Polyester and viscose blend", "fit": "Regular fit"},
     (8, 7, 25)),
    ("PROD-009", "Kids T-Shirt", "Comfortable cotton t-shirt for kids with fun designs",
     25, 20, "Fashion", "Clothing", "Kids", "H&M Kids",
     ["#FF0000", "#00FF00", "#FFFF00", "#FF69B4", "#00FFFF"], ["2Y", "3Y", "4Y", "5Y", "6Y", "7Y", "8Y"], 150, 4.2, 320,
     ["kids", "tshirt", "cotton", "comfortable"],
     {"material": "100% Cotton", "care": "Machine washable"},
     (2, 3, 15)),
    ("PROD-010", "Kids Sneakers", "Durable and comfortable sneakers for active kids",
     60, 15, "Fashion", "Shoes", "Kids", "Nike Kids",
     ["#FF0000", "#0000FF", "#00FF00", "#FFFF00", "#FF69B4"], ["10C", "11C", "12C", "13C", "1Y", "2Y", "3Y"], 80, 4.6, 180,
     ["kids", "sneakers", "durable", "comfortable"],
     {"material": "Synthetic upper with rubber sole", "closure": "Velcro straps for easy wear"},
     (1, 5, 30)),
]


def default_products() -> list[dict]:
    from .products_service import sales_price

    products = []
    for index, row in enumerate(_PRODUCT_ROWS, start=1):
        (pid, title, description, price, discount, category, subcategory, gender, brand,
         colors, sizes, stock, rating, reviews, tags, specifications, (days, hours, minutes)) = row
        products.append({
            "id": pid,
            "title": title,
            "description": description,
            "price": price,
            "discount": discount,
            "salesPrice": sales_price(price, discount),
            "category": category,
            "subcategory": subcategory,
            "gender": gender,
            "brand": brand,
            "colors": colors,
            "sizes": sizes,
            "stock": stock,
            "isActive": True,
            "isDeleted": False,
            "rating": rating,
            "reviews": reviews,
            "images": [f"/images/products/s{index}.jpg"],
            "tags": tags,
            "specifications": specifications,
            "createdAt": _ago(days=days, hours=hours, minutes=minutes),
            "updatedAt": _now(),
        })
    return products


def _user(uid, first, last, email, phone, role, status, department, position,
          joined_days, login_days, permissions, email_ok, phone_ok, two_factor, deleted_days=None):
    user = {
        "id": uid,
        "firstName": first,
        "lastName": last,
        "email": email,
        "phone": phone,
        "role": role,
        "status": status,
        "avatar": None,
        "department": department,
        "position": position,
        "joinDate": _ago(days=joined_days),
        "lastLogin": _ago(days=login_days),
        "permissions": permissions,
        "isEmailVerified": email_ok,
        "isPhoneVerified": phone_ok,
        "twoFactorEnabled": two_factor,
        "createdAt": _now(),
        "updatedAt": _now(),
    }
    if deleted_days is not None:
        user["deletedAt"] = _ago(days=deleted_days)
    return user


def default_users() -> list[dict]:
    return [
        _user("1", "John", "Doe", "john.doe@example.com", "+1234567890", "admin", "active",
              "IT", "System Administrator", 0, 2, ["read", "write", "delete", "admin"], True, True, True),
        _user("2", "Jane", "Smith", "jane.smith@example.com", "+1234567891", "manager", "active",
              "Sales", "Sales Manager", 30, 1, ["read", "write"], True, False, False),
        _user("3", "Mike", "Johnson", "mike.johnson@example.com", "+1234567892", "user", "inactive",
              "Marketing", "Marketing Specialist", 60, 7, ["read"], True, True, False),
        _user("4", "Sarah", "Wilson", "sarah.wilson@example.com", "+1234567893", "user", "deleted",
              "HR", "HR Assistant", 90, 15, ["read"], True, False, False, deleted_days=5),
    ]


def _seller(sid, first, last, email, phone, gender, city, seller_code, business_name, business_type,
            commission, status, verification, joined, sales, orders, rating, reviews, tags, notes):
    slug = business_name.lower().replace(" & ", "").replace(" ", "")
    return {
        "id": sid,
        "firstName": first,
        "lastName": last,
        "email": email,
        "phone": phone,
        "dateOfBirth": None,
        "gender": gender,
        "address": {"street": "", "city": city, "state": city, "country": "Egypt", "zipCode": ""},
        "sellerId": seller_code,
        "businessName": business_name,
        "businessType": business_type,
        "businessLicense": f"BL{seller_code[-3:]}",
        "taxId": f"TAX{seller_code[-3:]}",
        "commissionRate": commission,
        "status": status,
        "verificationStatus": verification,
        "joinDate": joined,
        "lastLogin": None,
        "totalSales": sales,
        "totalOrders": orders,
        "rating": rating,
        "totalReviews": reviews,
        "bankAccount": {"bankName": "", "accountNumber": "", "accountHolderName": f"{first} {last}"},
        "paymentMethod": "bank_transfer",
        "storeSettings": {
            "storeName": business_name,
            "storeDescription": "",
            "storeLogo": None,
            "storeBanner": None,
            "storeCategories": tags[:1],
        },
        "socialMedia": {"website": f"https://{slug}.example.com"},
        "documents": [],
        "notes": notes,
        "tags": tags,
        "isSystem": False,
        "createdAt": _now(),
        "updatedAt": _now(),
    }


def default_sellers() -> list[dict]:
    return [
        _seller("1", "Ahmed", "Hassan", "ahmed.hassan@seller.com", "+201234567890", "male", "Cairo",
                "SELL001", "Hassan Electronics", "electronics", 15, "active", "verified", "2020-01-15",
                150000, 250, 4.8, 120, ["Electronics", "Verified", "Top Seller"],
                "Reliable seller with excellent customer service"),
        _seller("2", "Fatma", "Ali", "fatma.ali@seller.com", "+201234567891", "female", "Alexandria",
                "SELL002", "Fatma Fashion", "fashion", 12, "active", "verified", "2019-06-10",
                95000, 180, 4.6, 95, ["Fashion", "Women", "Verified"], ""),
        _seller("3", "Mohamed", "Ibrahim", "mohamed.ibrahim@seller.com", "+201234567892", "male", "Giza",
                "SELL003", "Ibrahim Home & Garden", "home_garden", 10, "pending", "pending", "2023-11-01",
                25000, 45, 4.2, 20, ["Home & Garden", "New Seller"], ""),
        _seller("4", "Nour", "Mahmoud", "nour.mahmoud@seller.com", "+201234567893", "female", "Sharm El Sheikh",
                "SELL004", "Nour Beauty", "beauty", 18, "active", "verified", "2021-03-20",
                120000, 200, 4.9, 150, ["Beauty", "Premium", "Top Seller", "Verified"], ""),
        _seller("5", "Omar", "Sayed", "omar.sayed@seller.com", "+201234567894", "male", "Luxor",
                "SELL005", "Sayed Sports", "sports", 14, "suspended", "verified", "2022-08-05",
                45000, 80, 3.8, 40, ["Sports", "Suspended"], "Suspended pending policy review"),
    ]


def default_suppliers() -> list[dict]:
    rows = [
        ("supplier-1", "Tech Solutions Ltd", "Ahmed Hassan", "ahmed@techsolutions.com", "+20 123 456 7890",
         "123 Tech Street, Cairo, Egypt", "Electronics", 50000, "30 days"),
        ("supplier-2", "Fashion World", "Fatma Ali", "fatma@fashionworld.com", "+20 987 654 3210",
         "456 Fashion Ave, Alexandria, Egypt", "Fashion", 30000, "15 days"),
        ("supplier-3", "Home & Garden Supplies", "Mohamed Ibrahim", "mohamed@homesupplies.com", "+20 555 123 4567",
         "789 Garden St, Giza, Egypt", "Home & Garden", 25000, "45 days"),
    ]
    return [
        {
            "id": sid,
            "name": name,
            "contactPerson": contact,
            "email": email,
            "phone": phone,
            "address": address,
            "category": category,
            "status": "active",
            "creditLimit": credit,
            "paymentTerms": terms,
            "createdAt": _now(),
            "updatedAt": _now(),
        }
        for sid, name, contact, email, phone, address, category, credit, terms in rows
    ]


def default_inventory() -> list[dict]:
    rows = [
        ("inv-1", "PROD-001", "iPhone 15 Pro Max", "IPH15PM-001", "Electronics", 25, 5, 100, 800, 1079, "A-01-01", "supplier-1"),
        ("inv-2", "PROD-002", "Samsung Galaxy S24 Ultra", "SGS24U-002", "Electronics", 15, 3, 80, 750, 1104, "A-01-02", "supplier-1"),
        ("inv-3", "PROD-004", "Nike Air Max 270", "NAM270-004", "Fashion", 50, 10, 200, 80, 120, "B-02-01", "supplier-2"),
    ]
    return [
        {
            "id": iid,
            "productId": product_id,
            "productName": name,
            "sku": sku,
            "category": category,
            "currentStock": current,
            "minStock": min_stock,
            "maxStock": max_stock,
            "unitCost": unit_cost,
            "sellingPrice": selling,
            "location": location,
            "supplierId": supplier_id,
            "lastUpdated": _now(),
            "status": "active",
            "createdAt": _now(),
            "updatedAt": _now(),
        }
        for iid, product_id, name, sku, category, current, min_stock, max_stock, unit_cost, selling, location, supplier_id in rows
    ]


def default_purchases() -> list[dict]:
    return [
        {
            "id": "purchase-1",
            "purchaseNumber": "PO-2024-001",
            "supplierId": "supplier-1",
            "supplierName": "Tech Solutions Ltd",
            "orderDate": "2024-01-15",
            "expectedDelivery": "2024-01-25",
            "status": "pending",
            "items": [
                {"id": "item-1", "productId": "PROD-001", "productName": "iPhone 15 Pro Max",
                 "sku": "IPH15PM-001", "quantity": 50, "unitCost": 800, "totalCost": 40000},
                {"id": "item-2", "productId": "PROD-002", "productName": "Samsung Galaxy S24 Ultra",
                 "sku": "SGS24U-002", "quantity": 30, "unitCost": 750, "totalCost": 22500},
            ],
            "subtotal": 62500,
            "tax": 6250,
            "total": 68750,
            "notes": "Urgent order for new product launch",
            "createdAt": _now(),
            "updatedAt": _now(),
        },
        {
            "id": "purchase-2",
            "purchaseNumber": "PO-2024-002",
            "supplierId": "supplier-2",
            "supplierName": "Fashion World",
            "orderDate": "2024-01-20",
            "expectedDelivery": "2024-01-30",
            "status": "delivered",
            "items": [
                {"id": "item-3", "productId": "PROD-004", "productName": "Nike Air Max 270",
                 "sku": "NAM270-004", "quantity": 100, "unitCost": 80, "totalCost": 8000},
            ],
            "subtotal": 8000,
            "tax": 800,
            "total": 8800,
            "notes": "Regular stock replenishment",
            "deliveredDate": "2024-01-28",
            "createdAt": _now(),
            "updatedAt": _now(),
        },
    ]
