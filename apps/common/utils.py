"""
Common utility functions for API responses
"""
from rest_framework.response import Response
from rest_framework import status


def success_response(data=None, message="Success", status_code=status.HTTP_200_OK):
    """
    Standard success response envelope
    """
    response_data = {
        "code": status_code,
        "msg": str(message),
        "data": data
    }
    return Response(response_data, status=status_code)


def error_response(message="Error", errors=None, status_code=status.HTTP_400_BAD_REQUEST, data=None):
    """
    Standard error response envelope.

    ``data`` carries structured details the client needs to act on the
    error (e.g. a 3-D Secure redirect).
    """
    response_data = {
        "code": status_code,
        "msg": str(message)
    }
    if errors:
        response_data["errors"] = errors
    if data is not None:
        response_data["data"] = data
    return Response(response_data, status=status_code)
