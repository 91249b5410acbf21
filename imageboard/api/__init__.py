"""
HTTP surface: a thin FastAPI layer over the job dispatcher.
"""
