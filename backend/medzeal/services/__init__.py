"""
MedZeal Backend: Services Package
==================================

Business logic, independent of HTTP:

    subscriptions        live snapshots of vendors / appointments / blogs
    credit_cycle         pending vendor payments (aggregate, search, mark paid)
    inventory_service    vendors, products, stock deliveries, low-stock counter
    catalog_service      sellable product catalog (products/*)
    prescription_service prescriptions per patient
    blog_service         blog posts with thumbnail images
    appointment_service  appointment listing, approval, removal
    user_service         user directory and role lookup
    site_service         public site schedule and service packages
    file_service         thumbnail validation and storage
    smtp_service         appointment confirmation email (SMTP, retry, circuit breaker)
"""
