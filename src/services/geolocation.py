import httpx
import logging
import ipaddress
from dataclasses import dataclass
from fastapi import Request


logger = logging.getLogger('payment-service-geolocation')

UNKNOWN = 'Unknown'
LOCAL = 'Local'

IP_HEADER_CANDIDATES = (
    'X-Forwarded-For',
    'Proxy-Client-IP',
    'WL-Proxy-Client-IP',
    'HTTP_X_FORWARDED_FOR',
    'HTTP_X_FORWARDED',
    'HTTP_X_CLUSTER_CLIENT_IP',
    'HTTP_CLIENT_IP',
    'HTTP_FORWARDED_FOR',
    'HTTP_FORWARDED',
    'HTTP_VIA',
    'REMOTE_ADDR',
)


@dataclass(frozen=True)
class GeolocationService:
    client: httpx.AsyncClient
    base_url: str

    async def resolve_country(self, ip: str | None) -> str:
        if ip is None or not ip.strip():
            logger.warning('IP address is null or empty')
            return UNKNOWN

        if is_local_or_private_ip(ip):
            logger.debug(f'local or private IP detected: {ip}')
            return LOCAL

        url = f'{self.base_url}{ip}.json'
        logger.debug(f'calling geolocation service: {url}')
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            country = response.json().get('country')
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f'error resolving country for IP {ip}: {e!r}')
            return UNKNOWN

        if not country:
            logger.warning(f'no country data returned for IP: {ip}')
            return UNKNOWN

        logger.info(f'resolved country for IP {ip}: {country}')
        return country

    async def log_country(self, ip: str | None, context: str):
        country = await self.resolve_country(ip)
        logger.info(f'[ASYNC] Country resolved for IP {ip}: {country} | Context: client action {context}')


def is_local_or_private_ip(ip: str) -> bool:
    try:
        address = ipaddress.ip_address(ip.strip())
    except ValueError:
        return False
    return address.is_loopback or address.is_private


def get_client_ip(request: Request) -> str | None:
    for header in IP_HEADER_CANDIDATES:
        ip_list = request.headers.get(header)
        if ip_list and ip_list.strip() and ip_list.lower() != 'unknown':
            ip = ip_list.split(',')[0].strip()
            if ip and ip.lower() != 'unknown' and ip != '0:0:0:0:0:0:0:1':
                return ip

    return request.client.host if request.client else None


geolocation_service: GeolocationService | None = None


def get_geolocation_service() -> GeolocationService:
    assert geolocation_service is not None
    return geolocation_service
