import requests


def paystack_verify_response(reference=None, status="success", **data):
    """Body of GET /transaction/verify/<reference> as Paystack returns it."""
    tx = {"status": status, "id": data.pop("id", 4099260516)}
    if reference is not None:
        tx["reference"] = reference
    tx.update(data)
    return {"status": True, "message": "Verification successful", "data": tx}


def http_error(status_code):
    response = requests.Response()
    response.status_code = status_code
    return requests.HTTPError(f"{status_code} Client Error", response=response)
