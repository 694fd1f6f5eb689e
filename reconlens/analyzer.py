import re
from typing import List
from urllib.parse import parse_qsl, urlsplit

FORM_PAT = re.compile(r"<form[^>]*>", re.I)
INPUT_PAT = re.compile(r"<input[^>]*>", re.I)
TYPE_ATTR = re.compile(r"type\s*=", re.I)
TEXT_TYPE = re.compile(r"""type\s*=\s*["']?(text|search|email|password|url|tel)(?![\w-])""", re.I)
FILE_TYPE = re.compile(r"""type\s*=\s*["']?file(?![\w-])""", re.I)
PASSWORD_TYPE = re.compile(r"""type\s*=\s*["']?password(?![\w-])""", re.I)
AUTH_PATH = re.compile(r"login|signin|auth|password", re.I)
API_PATH = re.compile(r"/api/", re.I)
COMMENT_PAT = re.compile(r"<!--[\s\S]*?-->")
SENSITIVE_WORDS = re.compile(r"password|secret|key|token|todo|fixme|hack|bug", re.I)

FILE_UPLOAD = "File upload detected — potential RCE/upload bypass"
QUERY_PARAMS = "URL has query parameters — SQLi/XSS testing target"
AUTH_PAGE = "Authentication page — brute force/credential stuffing target"
API_ENDPOINT = "API endpoint — test for auth bypass and IDOR"


def analyze_page(body: str, url: str, content_type: str = "") -> List[str]:
    """Static attack-surface hints for one fetched page, in a fixed order."""
    findings: List[str] = []
    body = body or ""
    path = urlsplit(url).path

    forms = FORM_PAT.findall(body)
    if forms:
        findings.append(f"{len(forms)} form(s) — potential injection target")

    inputs = INPUT_PAT.findall(body)
    text_inputs = [i for i in inputs if TEXT_TYPE.search(i) or not TYPE_ATTR.search(i)]
    if text_inputs:
        findings.append(f"{len(text_inputs)} text input(s) — XSS/injection vector")

    if any(FILE_TYPE.search(i) for i in inputs):
        findings.append(FILE_UPLOAD)

    if parse_qsl(urlsplit(url).query):
        findings.append(QUERY_PARAMS)

    if AUTH_PATH.search(path) or any(PASSWORD_TYPE.search(i) for i in inputs):
        findings.append(AUTH_PAGE)

    if API_PATH.search(path) or "application/json" in (content_type or "").lower():
        findings.append(API_ENDPOINT)

    comments = [c for c in COMMENT_PAT.findall(body) if SENSITIVE_WORDS.search(c)]
    if comments:
        findings.append(f"{len(comments)} HTML comment(s) with sensitive keywords")

    return findings


def is_warning(finding: str) -> bool:
    """Findings worth a [!] line in the crawl transcript."""
    return finding == FILE_UPLOAD or finding.endswith("with sensitive keywords")
