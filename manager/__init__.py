# Manager package - workflows built on the core storage layer
#
# Modules:
# - parcel_service: Parcel lifecycle (register, advance status, change address, delete)
