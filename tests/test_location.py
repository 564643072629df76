from hajserv.location import Location


def test_defaults_are_empty():
    location = Location()
    assert location.path == ""
    assert location.root == ""


def test_fields_assignable():
    location = Location()
    location.path = "/images"
    location.root = "./www/img"
    assert location == Location(path="/images", root="./www/img")


def test_describe_contains_path_and_root():
    text = Location(path="/static", root="./public").describe()
    lines = text.split("\n")
    assert "Location" in lines[0] and lines[0].endswith("/static")
    assert "Root" in lines[1] and lines[1].endswith("./public")
    assert lines[0].startswith("\t")
    assert lines[1].startswith("\t\t")


def test_describe_ends_with_blank_line():
    assert Location(path="/", root="./").describe().endswith("\n\n")