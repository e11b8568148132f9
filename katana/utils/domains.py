"""Public-suffix based helpers for deriving registrable domains.

The suffix table covers the generic top-level domains and the common
second-level registries. A name whose ending is not listed falls back to
its last label as the public suffix.
"""

from __future__ import annotations

_MULTI_LABEL_SUFFIXES = frozenset({
    "co.uk", "org.uk", "me.uk", "ltd.uk", "plc.uk", "net.uk", "ac.uk",
    "gov.uk", "nhs.uk", "police.uk", "sch.uk",
    "com.au", "net.au", "org.au", "edu.au", "gov.au", "asn.au", "id.au",
    "co.nz", "net.nz", "org.nz", "govt.nz", "ac.nz",
    "co.jp", "ne.jp", "or.jp", "ac.jp", "go.jp", "ad.jp", "ed.jp", "gr.jp", "lg.jp",
    "com.br", "net.br", "org.br", "gov.br", "edu.br",
    "co.in", "net.in", "org.in", "firm.in", "gen.in", "ind.in", "ac.in",
    "edu.in", "gov.in", "res.in",
    "com.cn", "net.cn", "org.cn", "gov.cn", "edu.cn", "ac.cn",
    "com.hk", "org.hk", "net.hk", "edu.hk", "gov.hk",
    "com.tw", "org.tw", "net.tw", "edu.tw", "gov.tw",
    "co.kr", "or.kr", "ne.kr", "ac.kr", "go.kr", "re.kr",
    "com.sg", "net.sg", "org.sg", "edu.sg", "gov.sg",
    "co.za", "org.za", "net.za", "gov.za", "ac.za",
    "com.mx", "org.mx", "gob.mx", "edu.mx", "net.mx",
    "com.ar", "org.ar", "net.ar", "gob.ar",
    "com.tr", "org.tr", "net.tr", "gov.tr", "edu.tr",
    "co.id", "or.id", "ac.id", "go.id", "web.id",
    "com.my", "org.my", "net.my", "gov.my", "edu.my",
    "co.il", "org.il", "net.il", "ac.il", "gov.il",
    "com.ua", "org.ua", "net.ua", "gov.ua",
    "com.pl", "net.pl", "org.pl",
    "co.th", "or.th", "ac.th", "go.th", "in.th",
    "com.vn", "net.vn", "org.vn", "gov.vn", "edu.vn",
    "com.ph", "net.ph", "org.ph", "gov.ph", "edu.ph",
    "com.pk", "net.pk", "org.pk", "gov.pk", "edu.pk",
    "com.eg", "gov.eg", "edu.eg",
    "com.sa", "gov.sa", "edu.sa",
    "com.ng", "gov.ng", "edu.ng",
    "co.ke", "or.ke", "ac.ke", "go.ke",
})


class DomainError(ValueError):
    """Raised when a domain name cannot be split into its parts."""


def public_suffix(domain: str) -> str:
    """Return the public suffix of ``domain``."""
    labels = domain.split(".")
    for count in range(len(labels), 1, -1):
        candidate = ".".join(labels[-count:])
        if candidate.lower() in _MULTI_LABEL_SUFFIXES:
            return candidate
    return labels[-1]


def _check_labels(domain: str) -> None:
    if domain.startswith(".") or domain.endswith(".") or ".." in domain:
        raise DomainError(f"publicsuffix: empty label in domain {domain!r}")


def effective_tld_plus_one(domain: str) -> str:
    """Return the public suffix of ``domain`` plus one more label."""
    _check_labels(domain)
    suffix = public_suffix(domain)
    if len(domain) <= len(suffix):
        raise DomainError(f"publicsuffix: cannot derive eTLD+1 for domain {domain!r}")
    i = len(domain) - len(suffix) - 1
    if domain[i] != ".":
        raise DomainError(f"publicsuffix: invalid public suffix {suffix!r} for domain {domain!r}")
    return domain[domain.rfind(".", 0, i) + 1:]


def domain_rdn_and_dn(domain: str) -> tuple[str, str]:
    """Return the registrable domain and its bare name, e.g. ``("example.com", "example")``.

    Names that are themselves a public suffix come back unchanged with an
    empty bare name.
    """
    _check_labels(domain)
    suffix = public_suffix(domain)
    if len(domain) <= len(suffix):
        return domain, ""
    i = len(domain) - len(suffix) - 1
    if domain[i] != ".":
        return domain, ""
    start = domain.rfind(".", 0, i) + 1
    return domain[start:], domain[start:i]