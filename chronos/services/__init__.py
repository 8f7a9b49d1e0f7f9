# Services Module
#
# money: Decimal helpers
# models: Product and FilterSpec
# query: record query model
# repositories: record store contract and Supabase implementation
# storefront: composition root (import chronos.services.storefront directly)
