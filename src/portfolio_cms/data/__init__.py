"""Local durable storage for the portfolio CMS client."""
