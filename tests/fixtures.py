"""Test data fixtures for tag_geotag tests"""

from pathlib import Path


class TestDataFixtures:
    """Centralized test data fixtures"""

    @staticmethod
    def geotag_line(photo_id, time="2010-01-01 00:00:00", lat="35.6895", lon="139.6917", domain=3, path=42, token="00000000ab"):
        """Build one geotag source line using the default URL template"""
        return f'{photo_id},"{time}",{lat},{lon},http://farm{domain}.static.flickr.com/{path}/{photo_id}_{token}.jpg'

    @staticmethod
    def get_test_tag_lines():
        """Tag source lines: two tagged photos, one untagged, one quoted tag"""
        return [
            "10000001,vacation",
            "10000002,",
            "10000003,vacation",
            '10000004,"""new york"""',
            "10000003,beach",
        ]

    @classmethod
    def get_test_geotag_lines(cls):
        """Geotag source lines matching get_test_tag_lines"""
        return [
            cls.geotag_line(10000001, time="2010-01-01 00:00:00", domain=1, path=101, token="0123456789"),
            cls.geotag_line(10000002, time="2011-06-15 12:30:00", domain=2, path=202, token="abcdef0123"),
            cls.geotag_line(10000003, time="2012-03-01 08:00:00", domain=3, path=42, token="00000000ab"),
            cls.geotag_line(10000004, time="2011-06-15 12:30:00", lat="40.7128", lon="-74.006", domain=9, path=9999, token="ffffffffff"),
            "garbage line",
        ]

    @classmethod
    def create_test_data_files(cls, test_dir: Path):
        """Write tag.csv and geotag.csv into the given directory"""
        test_dir.mkdir(exist_ok=True)

        with open(test_dir / 'tag.csv', 'w') as f:
            f.write('\n'.join(cls.get_test_tag_lines()) + '\n')

        with open(test_dir / 'geotag.csv', 'w') as f:
            f.write('\n'.join(cls.get_test_geotag_lines()) + '\n')

        return True
