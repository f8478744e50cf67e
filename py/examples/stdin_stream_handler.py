from __future__ import annotations

import json
import sys

from streampipe_py import load_envelope, to_python


def handler(event, context):  # noqa: ANN001, ARG001
    envelope = load_envelope(event)
    for record in envelope.records:
        image = record.dynamodb.new_image or record.dynamodb.old_image or record.dynamodb.keys
        item = {name: to_python(value) for name, value in image.items()}
        print(record.event_name, json.dumps(item, default=str, sort_keys=True))


if __name__ == "__main__":
    handler(json.load(sys.stdin), None)
