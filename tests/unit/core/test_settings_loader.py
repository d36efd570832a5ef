"""Unit tests for settings.xml loading and merging."""

from pathlib import Path

from mvnide.core.settings_loader import XmlSettingsLoader, merge_settings, parse_settings_file

GLOBAL_SETTINGS = """<?xml version="1.0"?>
<settings xmlns="http://maven.apache.org/SETTINGS/1.0.0">
  <localRepository>/opt/global-repo</localRepository>
  <mirrors>
    <mirror>
      <id>corp</id>
      <url>https://global.example.com/maven</url>
      <mirrorOf>*</mirrorOf>
    </mirror>
  </mirrors>
  <servers>
    <server><id>corp</id><username>global</username></server>
    <server><id>releases</id><username>deployer</username></server>
  </servers>
</settings>
"""

USER_SETTINGS = """<?xml version="1.0"?>
<settings>
  <localRepository>/home/dev/.m2/repository</localRepository>
  <offline>true</offline>
  <mirrors>
    <mirror>
      <id>corp</id>
      <url>https://user.example.com/maven</url>
      <mirrorOf>central</mirrorOf>
    </mirror>
  </mirrors>
  <proxies>
    <proxy>
      <id>office</id>
      <protocol>https</protocol>
      <host>proxy.example.com</host>
      <port>3128</port>
      <nonProxyHosts>localhost|*.example.com</nonProxyHosts>
    </proxy>
  </proxies>
  <servers>
    <server><id>corp</id><username>alice</username><password>secret</password></server>
  </servers>
  <profiles>
    <profile>
      <id>internal</id>
      <activation><activeByDefault>true</activeByDefault></activation>
      <repositories>
        <repository><id>internal</id><url>https://repo.example.com/internal</url></repository>
      </repositories>
      <pluginRepositories>
        <pluginRepository><id>plugins</id><url>https://repo.example.com/plugins</url></pluginRepository>
      </pluginRepositories>
      <properties><env>dev</env></properties>
    </profile>
    <profile><id>extra</id></profile>
  </profiles>
  <activeProfiles><activeProfile>extra</activeProfile></activeProfiles>
</settings>
"""


def _write(path: Path, content: str) -> Path:
    path.write_text(content)
    return path


class TestParseSettingsFile:
    def test_parses_all_sections(self, tmp_path):
        raw, problems = parse_settings_file(_write(tmp_path / "settings.xml", USER_SETTINGS))

        assert problems == []
        assert raw["local_repository"] == "/home/dev/.m2/repository"
        assert raw["offline"] is True
        assert raw["mirrors"][0].mirror_of == "central"
        proxy = raw["proxies"][0]
        assert (proxy.protocol, proxy.host, proxy.port) == ("https", "proxy.example.com", 3128)
        assert proxy.non_proxy_hosts == "localhost|*.example.com"
        profile = raw["profiles"][0]
        assert profile.active_by_default
        assert profile.repositories[0].url == "https://repo.example.com/internal"
        assert profile.plugin_repositories[0].id == "plugins"
        assert profile.properties == {"env": "dev"}
        assert raw["active_profiles"] == ["extra"]

    def test_namespaced_file(self, tmp_path):
        raw, problems = parse_settings_file(_write(tmp_path / "settings.xml", GLOBAL_SETTINGS))
        assert problems == []
        assert [s.id for s in raw["servers"]] == ["corp", "releases"]
        assert raw["offline"] is None

    def test_invalid_xml_returns_no_settings(self, tmp_path):
        raw, problems = parse_settings_file(_write(tmp_path / "settings.xml", "<settings><mirrors>"))
        assert raw is None
        assert "Non-parseable settings" in problems[0]

    def test_invalid_proxy_port_is_a_problem(self, tmp_path):
        content = "<settings><proxies><proxy><id>p</id><host>h</host><port>abc</port></proxy></proxies></settings>"
        raw, problems = parse_settings_file(_write(tmp_path / "settings.xml", content))
        assert raw["proxies"] == []
        assert "invalid port" in problems[0]

    def test_incomplete_mirror_is_a_problem(self, tmp_path):
        content = "<settings><mirrors><mirror><id>m</id></mirror></mirrors></settings>"
        raw, problems = parse_settings_file(_write(tmp_path / "settings.xml", content))
        assert raw["mirrors"] == []
        assert len(problems) == 1


class TestXmlSettingsLoader:
    def test_user_settings_dominate_global(self, tmp_path):
        global_file = _write(tmp_path / "global.xml", GLOBAL_SETTINGS)
        user_file = _write(tmp_path / "user.xml", USER_SETTINGS)

        result = XmlSettingsLoader().load(global_file, user_file)
        settings = result.settings

        assert result.problems == []
        assert settings.local_repository == "/home/dev/.m2/repository"
        assert settings.offline is True
        assert [m.url for m in settings.mirrors] == ["https://user.example.com/maven"]
        assert settings.get_server("corp").username == "alice"
        assert settings.get_server("releases").username == "deployer"

    def test_missing_files_are_skipped(self, tmp_path):
        result = XmlSettingsLoader().load(tmp_path / "nope.xml", None)
        assert result.settings is not None
        assert result.settings.mirrors == []

    def test_unparseable_file_fails_the_load(self, tmp_path):
        global_file = _write(tmp_path / "global.xml", GLOBAL_SETTINGS)
        user_file = _write(tmp_path / "user.xml", "not xml")

        result = XmlSettingsLoader().load(global_file, user_file)

        assert result.settings is None
        assert result.problems


class TestMergeSettings:
    def test_scalars_fall_back_to_recessive(self):
        merged = merge_settings({"local_repository": None, "offline": None}, {"local_repository": "/r", "offline": True})
        assert merged["local_repository"] == "/r"
        assert merged["offline"] is True

    def test_active_profiles_are_unioned(self):
        merged = merge_settings({"active_profiles": ["a", "b"]}, {"active_profiles": ["b", "c"]})
        assert merged["active_profiles"] == ["a", "b", "c"]
