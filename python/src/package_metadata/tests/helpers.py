"""In-memory V3 registry served through httpx.MockTransport."""

from typing import Any

import httpx

BASE_URL = "https://registry.test"
INDEX_PATH = "/v3/index.json"
REGISTRATION_PATH = "/v3/registration5-semver2/"
SEARCH_PATH = "/query"
INDEX_URL = BASE_URL + INDEX_PATH


def catalog_entry(identifier: str, version: str, **fields: Any) -> dict[str, Any]:
    entry = {
        "@id": f"{BASE_URL}/catalog/{identifier.lower()}.{version}.json",
        "id": identifier,
        "version": version,
        "authors": f"{identifier} Authors",
        "description": f"The {identifier} package",
        "licenseExpression": "MIT",
        "licenseUrl": "https://licenses.nuget.org/MIT",
        "projectUrl": f"https://example.com/{identifier.lower()}",
        "listed": True,
    }
    entry.update(fields)
    return entry


class FakeRegistry:
    """Serves a service index, registration pages and search results for added packages."""

    def __init__(self):
        self.packages: dict[str, list[dict[str, Any]]] = {}
        self.owners: dict[str, Any] = {}
        self.paged: set[str] = set()
        self.failures: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def add_package(self, identifier: str, *versions: str, owners: Any = None, paged: bool = False):
        key = identifier.lower()
        self.packages.setdefault(key, []).extend(catalog_entry(identifier, v) for v in versions)
        if owners is not None:
            self.owners[key] = owners
        if paged:
            self.paged.add(key)

    def add_entry(self, identifier: str, version: str, **fields: Any):
        self.packages.setdefault(identifier.lower(), []).append(catalog_entry(identifier, version, **fields))

    def fail(self, path: str, failure: Any):
        """Make a path answer with an HTTP status code, or raise an httpx exception class."""
        self.failures[path] = failure

    def count(self, path: str) -> int:
        return sum(1 for request in self.requests if request.url.path == path)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        failure = self.failures.get(path)
        if isinstance(failure, int):
            return httpx.Response(failure)
        if failure is not None:
            raise failure("simulated failure", request=request)

        if path == INDEX_PATH:
            return httpx.Response(200, json=self._service_index())
        if path == SEARCH_PATH:
            return httpx.Response(200, json=self._search(request.url.params))
        if path.startswith(REGISTRATION_PATH):
            package_id, _, document = path[len(REGISTRATION_PATH):].partition("/")
            entries = self.packages.get(package_id)
            if entries is None:
                return httpx.Response(404)
            if document == "index.json":
                return httpx.Response(200, json=self._registration_index(package_id, entries))
            if document == "page.json":
                return httpx.Response(200, json={"items": self._leaves(entries)})

        return httpx.Response(404)

    def _service_index(self) -> dict[str, Any]:
        return {
            "version": "3.0.0",
            "resources": [
                {"@id": BASE_URL + REGISTRATION_PATH, "@type": "RegistrationsBaseUrl/3.6.0"},
                {"@id": BASE_URL + SEARCH_PATH, "@type": ["SearchQueryService", "SearchQueryService/3.5.0"]},
                {"@id": f"{BASE_URL}/flatcontainer/", "@type": "PackageBaseAddress/3.0.0"},
            ],
        }

    def _leaves(self, entries: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [{"@id": entry["@id"], "catalogEntry": entry} for entry in entries]

    def _registration_index(self, package_id: str, entries: list[dict[str, Any]]) -> dict[str, Any]:
        page = {
            "@id": f"{BASE_URL}{REGISTRATION_PATH}{package_id}/page.json",
            "count": len(entries),
        }
        if package_id not in self.paged:
            page["items"] = self._leaves(entries)
        return {"count": 1, "items": [page]}

    def _search(self, params: httpx.QueryParams) -> dict[str, Any]:
        key = params.get("q", "").lower()
        if key not in self.packages:
            return {"totalHits": 0, "data": []}
        return {
            "totalHits": 1,
            "data": [{"id": self.packages[key][0]["id"], "owners": self.owners.get(key, [])}],
        }
