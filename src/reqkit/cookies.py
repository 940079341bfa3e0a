"""Cookie jar that refuses cookies scoped to a public suffix."""

from __future__ import annotations

import logging
from functools import lru_cache
from http.cookiejar import Cookie, CookieJar, DefaultCookiePolicy, request_host

import tldextract

logger = logging.getLogger(__name__)

# Bundled Public Suffix List snapshot only, never fetched over the network.
_extract = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None, include_psl_private_domains=True)


@lru_cache(maxsize=1024)
def is_public_suffix(domain: str) -> bool:
    """True when ``domain`` is itself a public suffix such as ``com`` or ``github.io``."""
    domain = domain.strip(".").lower()
    if not domain:
        return False
    result = _extract(domain)
    return bool(result.suffix) and not result.domain and not result.subdomain


class PublicSuffixCookiePolicy(DefaultCookiePolicy):
    """Rejects a ``Domain`` attribute naming a public suffix, unless it is the request host itself."""

    def set_ok_domain(self, cookie: Cookie, request) -> bool:
        if cookie.domain_specified:
            domain = cookie.domain.lstrip(".").lower()
            if is_public_suffix(domain) and domain != request_host(request).lower():
                logger.debug("cookie %s rejected: domain %s is a public suffix", cookie.name, domain)
                return False
        return super().set_ok_domain(cookie, request)


def new_cookie_jar() -> CookieJar:
    return CookieJar(policy=PublicSuffixCookiePolicy())
