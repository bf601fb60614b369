"""In-memory stand-in for the subset of the Elasticsearch API the service uses."""
from __future__ import annotations
import re
from typing import Any, Dict, List, Optional

INDEX = "test-transactions"
MAX_RESULT_WINDOW = 10000


def _field_value(source: Dict[str, Any], field: str) -> Any:
    # keyword sub-fields hold the same value as their parent
    if field.endswith(".raw"):
        field = field[: -len(".raw")]
    return source.get(field)


def _wildcard_to_python(pattern: str) -> str:
    out = []
    chars = iter(pattern)
    for ch in chars:
        if ch == "\\":
            out.append(re.escape(next(chars, "\\")))
        elif ch == "*":
            out.append(".*")
        elif ch == "?":
            out.append(".")
        else:
            out.append(re.escape(ch))
    return "".join(out)


def matches(query: Dict[str, Any], source: Dict[str, Any]) -> bool:
    (kind, spec), = query.items()

    if kind == "match_all":
        return True

    if kind == "bool":
        filters = spec.get("filter", []) + spec.get("must", [])
        if not all(matches(q, source) for q in filters):
            return False
        should = spec.get("should", [])
        if should:
            needed = spec.get("minimum_should_match", 1)
            return sum(1 for q in should if matches(q, source)) >= needed
        return True

    (field, params), = spec.items()
    value = _field_value(source, field)

    if kind == "regexp":
        if not isinstance(value, str):
            return False
        return re.fullmatch(params["value"], value) is not None

    if kind == "wildcard":
        if not isinstance(value, str):
            return False
        flags = re.IGNORECASE if params.get("case_insensitive") else 0
        return re.fullmatch(_wildcard_to_python(params["value"]), value, flags | re.DOTALL) is not None

    if kind == "term":
        if isinstance(params, dict):
            params = params["value"]
        if isinstance(params, bool) or isinstance(value, bool):
            return value is params
        return value is not None and value == params

    if kind == "range":
        if value is None or isinstance(value, bool):
            return False
        checks = {
            "gte": lambda bound: value >= bound,
            "gt": lambda bound: value > bound,
            "lte": lambda bound: value <= bound,
            "lt": lambda bound: value < bound,
        }
        return all(checks[op](bound) for op, bound in params.items())

    raise NotImplementedError(f"query type {kind!r} not supported by the fake")


class _Indices:
    def __init__(self, store: "FakeElasticsearch"):
        self._store = store

    def exists(self, index: str) -> bool:
        return index in self._store.indices_created

    def create(self, index: str, body: Optional[Dict[str, Any]] = None, **kwargs: Any) -> Dict[str, Any]:
        self._store.indices_created[index] = body or {}
        return {"acknowledged": True, "index": index}


class _Cluster:
    def __init__(self, status: str):
        self.status = status

    def health(self) -> Dict[str, Any]:
        if self.status == "unreachable":
            raise ConnectionError("cluster unreachable")
        return {"status": self.status}


class FakeElasticsearch:
    """Evaluates the queries and aggregations built by ``elastic.query_builders``."""

    def __init__(self) -> None:
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.indices_created: Dict[str, Dict[str, Any]] = {}
        self.indices = _Indices(self)
        self.cluster = _Cluster("green")
        self.searches: List[Dict[str, Any]] = []
        self.fail_on: Optional[str] = None
        self.closed = False
        self._next_id = 0

    # --- writes -------------------------------------------------------

    def index_doc(self, source: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        if doc_id is None:
            self._next_id += 1
            doc_id = f"auto-{self._next_id}"
        self.docs.pop(doc_id, None)
        self.docs[doc_id] = dict(source)
        return doc_id

    def delete_by_query(self, index: str, query: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        doomed = [doc_id for doc_id, src in self.docs.items() if matches(query, src)]
        for doc_id in doomed:
            del self.docs[doc_id]
        return {"deleted": len(doomed)}

    # --- reads --------------------------------------------------------

    def info(self) -> Dict[str, Any]:
        return {"cluster_name": "fake", "version": {"number": "8.0.0-fake"}}

    def count(self, index: str, **kwargs: Any) -> Dict[str, Any]:
        return {"count": len(self.docs)}

    def search(self, index: str, body: Dict[str, Any], **kwargs: Any) -> Dict[str, Any]:
        self.searches.append(body)
        aggs = body.get("aggs", {})
        if self.fail_on and (self.fail_on in aggs or (self.fail_on == "hits" and not aggs)):
            raise RuntimeError(f"simulated store failure on {self.fail_on}")

        query = body.get("query", {"match_all": {}})
        hits = [(doc_id, src) for doc_id, src in self.docs.items() if matches(query, src)]

        start = body.get("from", 0)
        size = body.get("size", 10)
        if start + size > MAX_RESULT_WINDOW:
            raise RuntimeError(f"Result window is too large, from + size must be <= {MAX_RESULT_WINDOW}")
        page = hits[start:start + size]

        response: Dict[str, Any] = {
            "hits": {"hits": [{"_id": doc_id, "_source": dict(src)} for doc_id, src in page]},
        }
        if aggs:
            response["aggregations"] = {
                name: self._aggregate(spec, [src for _, src in hits]) for name, spec in aggs.items()
            }
        return response

    def _aggregate(self, spec: Dict[str, Any], sources: List[Dict[str, Any]]) -> Dict[str, Any]:
        if "sum" in spec:
            field = spec["sum"]["field"]
            return {"value": float(sum(s.get(field) or 0 for s in sources))}

        if "filter" in spec:
            return {"doc_count": sum(1 for s in sources if matches(spec["filter"], s))}

        if "filters" in spec:
            named = spec["filters"]["filters"]
            return {
                "buckets": {
                    name: {"doc_count": sum(1 for s in sources if matches(q, s))}
                    for name, q in named.items()
                }
            }

        if "composite" in spec:
            composite = spec["composite"]
            (source_spec,) = composite["sources"]
            (key_name, terms), = source_spec.items()
            field = terms["terms"]["field"]

            counts: Dict[Any, int] = {}
            for s in sources:
                key = s.get(field)
                if key is None and not terms["terms"].get("missing_bucket"):
                    continue
                counts[key] = counts.get(key, 0) + 1

            # nulls sort first, like the real composite aggregation
            keys = sorted(counts, key=lambda k: (k is not None, k or ""))
            after = composite.get("after")
            if after:
                position = keys.index(after[key_name]) + 1 if after[key_name] in keys else len(keys)
                keys = keys[position:]
            keys = keys[: composite["size"]]

            result: Dict[str, Any] = {
                "buckets": [{"key": {key_name: k}, "doc_count": counts[k]} for k in keys]
            }
            if keys:
                result["after_key"] = {key_name: keys[-1]}
            return result

        raise NotImplementedError(f"aggregation {spec!r} not supported by the fake")

    def close(self) -> None:
        self.closed = True


def fake_bulk(client: FakeElasticsearch, actions, **kwargs: Any):
    """Replacement for ``elasticsearch.helpers.bulk`` writing into the fake."""
    count = 0
    for action in actions:
        client.index_doc(action["_source"], action.get("_id"))
        count += 1
    return count, []


def make_record(n, *, month=3, year=2022, price=100.0, category="electronics", sold=True, **extra):
    """Raw dataset item for product ``n`` sold in ``year``-``month``."""
    record = {
        "id": n,
        "title": f"Product {n}",
        "description": f"Description for product {n}",
        "price": price,
        "dateOfSale": f"{year}-{month:02d}-{(n % 28) + 1:02d}T10:00:00+05:30",
        "category": category,
        "sold": sold,
    }
    record.update(extra)
    return record
