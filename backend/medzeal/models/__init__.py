# Models package init
"""
MedZeal Backend: Store Document Models
=======================================

What:  Store path builders (paths.py) and write-side document shapes
       (inventory.py, clinic.py).
Why:   The realtime database has no schema; these modules are the schema.
"""
