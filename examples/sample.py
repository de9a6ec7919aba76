"""
Sample host: lists the registered definitions and, when a capture token
is given, tests it and commits the images passed on the command line.

Usage:
    python examples/sample.py [capture_token [image ...]]
"""
import base64
import json
import logging
import sys

import connector_blockchain

NUMBERS_UID = "70d8664a-d512-4517-a5e8-5d4da81756a7"


def main(argv):
    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")

    # Loaded once when the host starts
    connector = connector_blockchain.init()

    for definition in connector.list_definitions():
        print(json.dumps(definition.to_dict(), indent=2))
        print(f"Credential fields: {connector.list_credential_fields(definition.id)}")

    if not argv:
        return 0

    config = {"capture_token": argv[0]}
    state = connector.test(NUMBERS_UID, config)
    print(f"Connection state: {state.name}")

    images = []
    for path in argv[1:]:
        with open(path, "rb") as f:
            images.append(base64.b64encode(f.read()).decode("ascii"))
    if not images:
        return 0

    connection = connector.create_execution(NUMBERS_UID, config)
    try:
        outputs = connection.execute([{"images": images}])
    except connector_blockchain.ConnectorError as e:
        print(f"Execution failed: {e}")
        return 1

    print(json.dumps(outputs, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
