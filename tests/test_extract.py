from streamfinder.providers import extract


def test_hls_key_source():
    js = 'var links={"hls4":"/stream/x.txt","hls2":"https://cdn.example.com/hls/master.m3u8?t=1&e=2"};'
    assert extract.find_hls_source(js) == "https://cdn.example.com/hls/master.m3u8?t=1&e=2"


def test_file_source_either_quote():
    assert extract.find_file_source("file: 'https://a.example/m.m3u8'") == "https://a.example/m.m3u8"
    assert extract.find_file_source('sources:[{file:"https://b.example/m.m3u8"}]') == "https://b.example/m.m3u8"
    assert extract.find_file_source("nothing") is None


def test_find_master_url_falls_through():
    assert extract.find_master_url("x = 'https://c.example/v/playlist.m3u8'") == "https://c.example/v/playlist.m3u8"
    assert extract.find_master_url("no links") is None


def test_player_src():
    assert extract.find_player_src("src: '/prorcp/abc=='") == "/prorcp/abc=="
    assert extract.find_player_src("src: ''") is None
    assert extract.find_player_src("") is None


def test_origin_of():
    assert extract.origin_of("https://swiftplayers.com/e/abc") == "https://swiftplayers.com"
    assert extract.origin_of("//cloudnestra.com/rcp/x") == "https://cloudnestra.com"
    assert extract.origin_of("/relative/path") is None
    assert extract.origin_of("") is None
