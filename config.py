from decouple import config
from pathlib import Path

# Directory paths
DATA_DIR = Path(config('DATA_DIR', default='.'))

# File names
TAG_SOURCE_FILE = 'tag.csv'
GEOTAG_SOURCE_FILE = 'geotag.csv'
TAG_PP_FILE = 'tag_pp.csv'
GEOTAG_PP_FILE = 'geotag_pp.csv'
TAG_ULTIMATE_FILE = 'tag_ultimate.csv'
GEOTAG_ULTIMATE_FILE = 'geotag_ultimate.csv'

# Sentinel bucket for ids with an empty tag field
NO_TAG = 'NO_TAG'

# Photo URL template: <prefix><domain digit><common><path>/<id>_<hex token><suffix>
URL_PREFIX = config('URL_PREFIX', default='http://farm')
URL_COMMON = config('URL_COMMON', default='.static.flickr.com/')
URL_SUFFIX = config('URL_SUFFIX', default='.jpg')

# Ranking constants
ENTRY_COUNT = config('ENTRY_COUNT', default=100, cast=int)    # Most recent ids kept per tag
STRICT_ULTIMATE = config('STRICT_ULTIMATE', default=False, cast=bool)

# Logging
PROGRESS_INTERVAL = config('PROGRESS_INTERVAL', default=1_000_000, cast=int)

# Pipeline step definitions
PIPELINE_STEPS = [
    {
        'name': 'tag-pp',
        'description': 'Aggregate tag assignments into an inverted index',
        'required_files': [TAG_SOURCE_FILE],
        'output_files': [TAG_PP_FILE],
    },
    {
        'name': 'geotag-pp',
        'description': 'Compact geotag records and drop untagged photos',
        'required_files': [GEOTAG_SOURCE_FILE],
        'output_files': [GEOTAG_PP_FILE],
        'dependencies': ['tag-pp'],
    },
    {
        'name': 'ultimate',
        'description': 'Keep the most recent photos per tag and deduplicate geotags',
        'required_files': [],
        'output_files': [TAG_ULTIMATE_FILE, GEOTAG_ULTIMATE_FILE],
        'dependencies': ['tag-pp', 'geotag-pp'],
    },
]
