"""
Serving — FastAPI application exposing search, indexing, upload and
document management over HTTP.
"""
