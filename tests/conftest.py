"""Shared pytest fixtures for mpm tests — no network or Maven needed."""

from pathlib import Path

import pytest

from mpm.testing import FakeRegistry

SAMPLE_POM = """\
<?xml version="1.0" encoding="UTF-8"?>
<!-- Sample service -->
<project xmlns="http://maven.apache.org/POM/4.0.0"
         xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
         xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 http://maven.apache.org/xsd/maven-4.0.0.xsd">
    <modelVersion>4.0.0</modelVersion>

    <groupId>com.example</groupId>
    <artifactId>demo</artifactId>
    <version>1.0.0-SNAPSHOT</version>

    <properties>
        <!-- keep in sync with the CI image -->
        <maven.compiler.release>17</maven.compiler.release>
        <guava.version>32.1.2-jre</guava.version>
    </properties>

    <dependencyManagement>
        <dependencies>
            <dependency>
                <groupId>org.junit</groupId>
                <artifactId>junit-bom</artifactId>
                <version>5.10.0</version>
                <type>pom</type>
                <scope>import</scope>
            </dependency>
        </dependencies>
    </dependencyManagement>

    <dependencies>
        <!-- core -->
        <dependency>
            <groupId>com.google.guava</groupId>
            <artifactId>guava</artifactId>
            <version>${guava.version}</version>
        </dependency>
        <dependency>
            <groupId>org.junit.jupiter</groupId>
            <artifactId>junit-jupiter</artifactId>
            <scope>test</scope>
        </dependency>
        <dependency>
            <groupId>org.projectlombok</groupId>
            <artifactId>lombok</artifactId>
            <version>1.18.30</version>
            <scope>provided</scope>
        </dependency>
    </dependencies>

    <build>
        <plugins>
            <plugin>
                <groupId>org.apache.maven.plugins</groupId>
                <artifactId>maven-surefire-plugin</artifactId>
                <dependencies>
                    <dependency>
                        <groupId>org.apache.maven.surefire</groupId>
                        <artifactId>surefire-junit-platform</artifactId>
                        <version>3.1.2</version>
                    </dependency>
                </dependencies>
            </plugin>
        </plugins>
    </build>
</project>
"""

NO_NAMESPACE_POM = """\
<project>
  <modelVersion>4.0.0</modelVersion>
  <groupId>org.sample</groupId>
  <artifactId>plain</artifactId>
  <version>0.1</version>
</project>
"""


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def sample_pom(tmp_path: Path) -> Path:
    path = tmp_path / "pom.xml"
    path.write_text(SAMPLE_POM)
    return path


@pytest.fixture
def plain_pom(tmp_path: Path) -> Path:
    path = tmp_path / "pom.xml"
    path.write_text(NO_NAMESPACE_POM)
    return path


@pytest.fixture
def registry() -> FakeRegistry:
    """A fake Maven Central with a few well-known artifacts."""
    fake = FakeRegistry()
    fake.add(
        "com.fasterxml.jackson.core",
        "jackson-databind",
        ["2.15.2", "2.15.1", "2.15.0", "2.14.3"],
        version_count=180,
    )
    fake.add("org.projectlombok", "lombok", ["1.18.30", "1.18.28"], version_count=60)
    fake.add("org.springframework.boot", "spring-boot-starter", ["3.1.4"], version_count=250)
    fake.add("org.springframework.boot", "spring-boot", ["3.1.4"], version_count=240)
    fake.add("junit", "junit", ["4.13.2", "4.13.1"], version_count=32)
    return fake
