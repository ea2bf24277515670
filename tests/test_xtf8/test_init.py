"""Test module for xtf8 package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import xtf8

    # Assert
    assert xtf8 is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import xtf8

    # Assert
    assert isinstance(xtf8.__version__, str)
    assert xtf8.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    import xtf8

    assert xtf8.__author__ == "XTF8 Team"


def test_package_all_exports() -> None:
    """Test that __all__ contains expected exports."""
    # Arrange & Act
    import xtf8

    # Assert
    expected_exports = [
        "encode",
        "decode",
        "XTF8Codec",
        "transcode_size",
        "transcode_into",
        "transform",
        "ErrorPolicy",
        "TranscodeMode",
        "TranscodeAbortedError",
    ]
    for name in expected_exports:
        assert name in xtf8.__all__
        assert hasattr(xtf8, name)


def test_level_one_round_trip() -> None:
    """Test the top-level encode and decode functions."""
    import xtf8

    data = bytes(range(256))

    assert xtf8.decode(xtf8.encode(data)) == data
