"""Small pack files for tests, built with the writer"""

import datetime
import io

from postcodepack import PostcodePackWriter

# Reference points from the full ONS dataset
REFERENCE = {
    'SW1A': (-0.13218647252613103, 51.5044968742504),
    'CB1': (0.14143769251545102, 52.19525652785534),
    'B1': (-1.9093050120546273, 52.47981422664225),
    'SW1A 2AA': (-0.12764373597314282, 51.50349842618448),
    'CB2 3DS': (0.12311532175173667, 52.20324411238269),
}

LAST_UPDATED = datetime.datetime(2025, 2, 1, tzinfo=datetime.timezone.utc)


def pack_bytes(entries, version=2, **kwargs):
    """Return the bytes of a pack holding entries, a dict of postcode: (lon, lat)"""

    kwargs.setdefault('last_updated', LAST_UPDATED)

    f = io.BytesIO()

    with PostcodePackWriter(f, version=version, **kwargs) as w:
        for pc, (lon, lat) in entries.items():
            w.write_postcode(pc, lon, lat)

    return f.getvalue()


def reference_entries(version=2):
    if version >= 2:
        return dict(REFERENCE)
    return {pc: ll for pc, ll in REFERENCE.items() if len(pc.replace(' ', '')) > 4}
