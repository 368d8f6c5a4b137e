"""
Mastercard ATM Locations client.

Replies are read by content type: JSON as is, XML (the v1 format) mapped onto
the same ATM fields the JSON API uses.

Every call is signed with ``OAuthSigner``. A signing failure raises and the
request is never sent; an API or transport failure comes back as a result
dict with ``success: False``.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Union

import httpx

from .signer import OAuthSigner

logger = logging.getLogger(__name__)

ATM_SEARCH_ENDPOINT = "/locations/atms/searches"

_QUERY_FIELDS = {
    "PageLength": "limit",
    "PageOffset": "offset",
    "Distance": "distance",
    "DistanceUnit": "distance_unit",
}

# v2 field name -> path under an <Atm> element
_XML_ATM_FIELDS = {
    "locationName": "Location/Name",
    "addressLine1": "Location/Address/Line1",
    "addressLine2": "Location/Address/Line2",
    "city": "Location/Address/City",
    "postalCode": "Location/Address/PostalCode",
    "countrySubdivisionName": "Location/Address/CountrySubdivision/Name",
    "countryName": "Location/Address/Country/Name",
    "latitude": "Location/Point/Latitude",
    "longitude": "Location/Point/Longitude",
    "locationType": "Location/LocationType/Type",
    "distance": "Location/Distance",
    "distanceUnit": "Location/DistanceUnit",
    "handicapAccessible": "HandicapAccessible",
    "camera": "Camera",
    "availability": "Availability",
    "accessFees": "AccessFees",
    "owner": "Owner",
    "sharedDeposit": "SharedDeposit",
    "sponsor": "Sponsor",
    "supportEmv": "SupportEMV",
}


def _strip_namespaces(root: ET.Element) -> ET.Element:
    for element in root.iter():
        element.tag = element.tag.split("}", 1)[-1]
    return root


def _text(element: ET.Element, path: str) -> str:
    found = element.find(path)
    if found is None or found.text is None:
        return ""
    return found.text.strip()


def xml_to_dict(element: ET.Element) -> Any:
    """Generic conversion: leaves become text, repeated tags become lists."""
    children = list(element)
    if not children:
        return (element.text or "").strip()
    result: Dict[str, Any] = {}
    for child in children:
        value = xml_to_dict(child)
        if child.tag not in result:
            result[child.tag] = value
        elif isinstance(result[child.tag], list):
            result[child.tag].append(value)
        else:
            result[child.tag] = [result[child.tag], value]
    return result


def parse_xml(content: Union[bytes, str]) -> Dict[str, Any]:
    """
    Parse an XML reply. An ``<Atms>`` document becomes ``{"count", "total",
    "offset", "atms"}`` with v2 field names; anything else is converted
    generically. Raises ``ET.ParseError`` on malformed input.
    """
    root = _strip_namespaces(ET.fromstring(content))
    atm_elements = list(root.iter("Atm"))
    if root.tag != "Atms" and not atm_elements:
        return {root.tag: xml_to_dict(root)}

    atms: List[Dict[str, str]] = []
    for atm in atm_elements:
        fields = {name: _text(atm, path) for name, path in _XML_ATM_FIELDS.items()}
        atms.append({name: value for name, value in fields.items() if value})

    total = _text(root, "TotalCount")
    offset = _text(root, "PageOffset")
    return {
        "count": len(atms),
        "total": int(total) if total.isdigit() else len(atms),
        "offset": int(offset) if offset.isdigit() else 0,
        "atms": atms,
    }


def parse_body(response: httpx.Response) -> Any:
    """Decode by content type; without a usable one, try JSON and then XML."""
    content_type = response.headers.get("content-type", "")
    if "xml" in content_type:
        return parse_xml(response.content)
    if "json" in content_type:
        return response.json()
    try:
        return response.json()
    except ValueError:
        return parse_xml(response.content)


class MastercardClient:
    def __init__(
        self,
        signer: OAuthSigner,
        api_url: str,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ):
        self.signer = signer
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._http = http_client or httpx.Client(timeout=timeout)

    def close(self):
        self._http.close()

    def search_atms(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Search ATMs near a point, a postal code or a city.

        ``params`` uses the API's v1 names (``Latitude``, ``PostalCode``,
        ``PageLength``...); paging and distance go in the query string, the
        location goes in the JSON body.
        """
        query = {
            name: params[key] for key, name in _QUERY_FIELDS.items() if params.get(key) is not None
        }

        body: Dict[str, Any] = {}
        if params.get("Latitude") is not None and params.get("Longitude") is not None:
            body["latitude"] = str(params["Latitude"])
            body["longitude"] = str(params["Longitude"])
        if params.get("PostalCode"):
            body["postalCode"] = params["PostalCode"]
        if params.get("Country"):
            body["countryCode"] = params["Country"]
        if params.get("City"):
            body["city"] = params["City"]

        return self.make_authenticated_request("POST", ATM_SEARCH_ENDPOINT, query, body)

    def make_authenticated_request(
        self,
        method: str,
        endpoint: str,
        query_params: Optional[Dict[str, Any]] = None,
        body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        # Signing happens outside the try: a bad key must not look like an API error
        signed = self.signer.sign_request(method, self.api_url + endpoint, query_params, body)

        try:
            response = self._http.request(
                signed.method,
                signed.url,
                content=signed.body or None,
                headers=signed.headers,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            logger.error(f"Mastercard API request to {endpoint} failed: {e}")
            return {"success": False, "error": "EXCEPTION", "message": str(e)}

        try:
            payload = parse_body(response)
        except (ValueError, ET.ParseError) as e:
            if response.status_code == 200:
                logger.error(f"Unreadable Mastercard reply for {endpoint}: {e}")
                return {
                    "success": False,
                    "error": "PARSE_ERROR",
                    "message": "Mastercard returned a response that could not be read",
                    "status": response.status_code,
                    "body": response.text[:500],
                }
            payload = response.text

        if response.status_code == 200:
            return {"success": True, "data": payload, "status": response.status_code}

        logger.error(f"Mastercard API returned {response.status_code} for {endpoint}")
        return {
            "success": False,
            "error": "API_ERROR",
            "message": "Failed to retrieve data from Mastercard",
            "status": response.status_code,
            "body": payload,
        }
