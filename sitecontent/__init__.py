"""
Site Content Store - Editable text and images for a small website.

A single FastAPI service that keeps a flat key/value table of page content
in SQLite and relays image uploads to Cloudinary, storing the returned URL
as the value for the image's content key.
"""
