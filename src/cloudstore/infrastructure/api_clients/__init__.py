from .http_request import HTTPResponse, HTTPResponseError, encode_body, http_request

__all__ = ["HTTPResponse", "HTTPResponseError", "encode_body", "http_request"]
