# vendor-insights - Core Services
# Pure, synchronous transformations over already-fetched data
