import json

from gomsort.models.ast_models import MethodRecord


# --- Pretty printing & JSON export ------------------------------------------

def summarize_methods(methods: list[MethodRecord]) -> list[dict]:
    """
    Flattens method records (in target order) into plain dicts. Plain data
    crosses process boundaries cheaply and serializes straight to JSON.
    """
    return [
        {
            "receiver": m.receiver_type_name,
            "receiverType": m.receiver_type,
            "name": m.name,
            "exported": m.is_exported,
            "maxDepth": m.max_depth,
            "inDegree": m.in_degree,
            "originalOrder": m.original_order,
            "line": m.line,
            "calls": list(m.calls),
        }
        for m in methods
    ]


def print_summary(results) -> None:
    """
    Human-friendly printout of the analysis behind each file's order.
    """
    for result in results:
        status = "error" if result.error else ("reordered" if result.changed else "in order")
        print(f"\n=== {result.path} ({status}) ===")
        if result.error:
            print(f"  {result.error}")
            continue
        receiver = None
        for position, m in enumerate(result.methods):
            if m["receiver"] != receiver:
                receiver = m["receiver"]
                print(f"\n[{receiver}]")
            moved = "" if m["originalOrder"] == position else "  (moved)"
            print(
                f"  - {m['name']}  depth={m['maxDepth']} in={m['inDegree']}"
                f"  @ {m['line'] + 1}{moved}"
            )
            # Repeated call sites are listed once
            for call in dict.fromkeys(m["calls"]):
                print(f"      calls: {receiver}.{call}")


def to_json(results) -> str:
    """
    Serializes the run to JSON, e.g. for editor integrations or CI logs.
    """
    out = {
        "files": [
            {
                "path": r.path,
                "changed": r.changed,
                "written": r.written,
                "error": r.error,
                "methods": r.methods,
            }
            for r in results
        ]
    }
    return json.dumps(out, indent=2)
