"""Mirror a Shopify store sitemap and serve it as sitemap-protocol XML."""

__version__ = "1.0.0"
