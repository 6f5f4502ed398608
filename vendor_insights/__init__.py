"""vendor-insights: event analytics and operating-hours core for vendor storefronts."""

__version__ = "0.1.0"
