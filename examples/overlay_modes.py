#!/usr/bin/env python3
"""
Overlay mode example.

Resolves the same record under each overlay mode and prints the
resulting draw order.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from arscene.ar import RawConfig, resolve_config


RECORD = {
    "markerType": "hiro",
    "markerDataUrl": "USE_DEFAULT_HIRO_PATTERN",
    "overlayConfig": {
        "custom": {"type": "image", "src": "https://cdn.example.com/overlays/sale.png", "scale": [0.5, 0.5, 0.5]},
    },
    "metadata": {
        "title": "WMCYN Tote Bag",
        "actions": [{"type": "purchase", "label": "Buy", "url": "https://shop.example.com/tote"}],
    },
}


def main():
    """Run overlay mode example."""
    print("=" * 50)
    print("AR Scene Overlay Modes")
    print("=" * 50)

    for mode in ("default", "custom", "stacked", "bogus"):
        record = dict(RECORD)
        record["overlayConfig"] = dict(RECORD["overlayConfig"], mode=mode)

        resolved = resolve_config(RawConfig.from_dict(record))

        print(f"\nMode: {mode}")
        print(f"  Marker URL: {resolved.marker_data_url}")
        for index, overlay in enumerate(resolved.overlays, start=1):
            print(f"  {index}. {overlay.type.value}: {overlay.src or overlay.text}")


if __name__ == "__main__":
    main()
