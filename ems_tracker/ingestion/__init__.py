"""
Ingestion layer — turning files into store inputs.

Submodules:
  rider_csv — Headerless rider CSV (``code,name,region,vehicleType,tshirtQuantity``)
  photo     — Image file → embedded ``data:`` URI for a rider's equipment photo
"""
