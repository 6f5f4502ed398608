# vendor-insights - Functional Core
# Pure services, port protocols and error types; no I/O here
