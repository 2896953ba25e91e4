"""
Search query pipeline: pagination guard, engine dispatch, authorization
filtering and result sanitizing, plus the `/query` endpoint.
"""
