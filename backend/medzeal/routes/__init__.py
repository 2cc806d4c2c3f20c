"""
MedZeal Backend: API Routes Package
====================================

Route inventory:
    credit_cycle.py   GET  /api/credit-cycle
                      POST /api/credit-cycle/{vendor_id}/{product_id}/{history_id}/done
    inventory.py      GET/POST /api/vendors, GET /api/vendors/{id},
                      POST /api/vendors/{id}/products, POST /api/vendors/{id}/products/{pid}/stock,
                      GET /api/inventory/products | low-stock | dashboard
    catalog.py        /api/products (list, create, update, delete)
    prescriptions.py  /api/prescriptions/{patient_id}
    blogs.py          /api/blogs, GET /api/files/{path}
    appointments.py   /api/appointments
    users.py          /api/users, /api/users/{uid}/role
    email.py          POST /api/send-email
    site.py           GET /api/site/schedule, GET /api/site/services
    health.py         GET /health

Routes stay thin: parse the request, call one service method, shape the response.
"""
