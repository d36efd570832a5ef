"""Shared fixtures for CLI command tests."""

from pathlib import Path

import pytest
from click.testing import CliRunner

SETTINGS_XML = """<?xml version="1.0"?>
<settings>
  <localRepository>{local_repository}</localRepository>
  <mirrors>
    <mirror>
      <id>files</id>
      <url>{mirror_url}</url>
      <mirrorOf>*</mirrorOf>
    </mirror>
  </mirrors>
  <servers>
    <server><id>files</id><username>reader</username></server>
  </servers>
  <profiles>
    <profile>
      <id>internal</id>
      <activation><activeByDefault>true</activeByDefault></activation>
      <repositories>
        <repository><id>internal</id><url>https://repo.example.com/internal</url></repository>
      </repositories>
    </profile>
  </profiles>
</settings>
"""

POM_XML = """<?xml version="1.0"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <groupId>org.example</groupId>
  <artifactId>{artifact_id}</artifactId>
  <version>1.0</version>
  <packaging>{packaging}</packaging>
  {body}
</project>
"""

COMPILER_1_6 = """
  <build>
    <plugins>
      <plugin>
        <artifactId>maven-compiler-plugin</artifactId>
        <configuration><source>1.6</source><target>1.6</target></configuration>
      </plugin>
    </plugins>
  </build>
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def remote_repo(tmp_path) -> Path:
    """Directory served as the file:// mirror of every repository."""
    path = tmp_path / "remote"
    path.mkdir()
    return path


@pytest.fixture
def local_repo(tmp_path) -> Path:
    return tmp_path / "local"


@pytest.fixture
def config_file(tmp_path, remote_repo, local_repo, monkeypatch) -> Path:
    """Config pointing at a user settings.xml in tmp_path."""
    for name in ("MVNIDE_CONFIG", "MVNIDE_OFFLINE", "MVNIDE_USER_SETTINGS"):
        monkeypatch.delenv(name, raising=False)
    settings_xml = tmp_path / "settings.xml"
    settings_xml.write_text(
        SETTINGS_XML.format(local_repository=local_repo, mirror_url=remote_repo.as_uri())
    )
    config = tmp_path / "config.yaml"
    config.write_text(f"user_settings_file: {settings_xml}\n")
    monkeypatch.setenv("MVNIDE_CONFIG", str(config))
    return config


@pytest.fixture
def write_pom():
    """Factory writing a minimal pom.xml into a directory."""

    def _write(directory: Path, artifact_id: str = "demo", packaging: str = "jar", body: str = "") -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        pom = directory / "pom.xml"
        pom.write_text(POM_XML.format(artifact_id=artifact_id, packaging=packaging, body=body))
        return pom

    return _write


@pytest.fixture
def java_project(tmp_path, write_pom) -> Path:
    """A jar project compiled for Java 1.6 with main and test sources."""
    directory = tmp_path / "demo"
    write_pom(directory, body=COMPILER_1_6)
    (directory / "src" / "main" / "java").mkdir(parents=True)
    (directory / "src" / "test" / "java").mkdir(parents=True)
    return directory


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep rich tables from folding cell text in captured output."""
    from mvnide.cli.utils import console

    monkeypatch.setattr(console, "width", 200)
