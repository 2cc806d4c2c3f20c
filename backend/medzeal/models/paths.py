"""Store paths (schema-in-code).

The realtime database has no DDL; a node exists once something is written to it.
These constants and builders are the single source of truth for where each
entity lives.
"""

VENDORS = "vendors"
PRODUCTS = "products"
APPOINTMENTS = "appointments"
BLOGS = "blogs"
USERS = "users"
PRESCRIPTIONS = "prescriptions"
SALES = "sales"


def vendor_path(vendor_id: str) -> str:
    return f"{VENDORS}/{vendor_id}"


def vendor_products_path(vendor_id: str) -> str:
    return f"{VENDORS}/{vendor_id}/products"


def vendor_product_path(vendor_id: str, product_id: str) -> str:
    return f"{VENDORS}/{vendor_id}/products/{product_id}"


def product_history_path(vendor_id: str, product_id: str) -> str:
    return f"{vendor_product_path(vendor_id, product_id)}/history"


def history_entry_path(vendor_id: str, product_id: str, history_id: str) -> str:
    return f"{product_history_path(vendor_id, product_id)}/{history_id}"


def product_sell_history_entry_path(vendor_id: str, product_id: str, entry_id: str) -> str:
    return f"{vendor_product_path(vendor_id, product_id)}/sellhistory/{entry_id}"


def sale_path(sale_id: str) -> str:
    return f"{SALES}/{sale_id}"


def catalog_product_path(product_id: str) -> str:
    return f"{PRODUCTS}/{product_id}"


def appointment_path(uid: str, appointment_id: str) -> str:
    return f"{APPOINTMENTS}/{uid}/{appointment_id}"


def blog_path(blog_id: str) -> str:
    return f"{BLOGS}/{blog_id}"


def user_path(uid: str) -> str:
    return f"{USERS}/{uid}"


def patient_prescriptions_path(patient_id: str) -> str:
    return f"{PRESCRIPTIONS}/{patient_id}"
