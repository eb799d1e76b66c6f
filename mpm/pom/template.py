"""Skeleton pom.xml written by ``mpm init``."""

from __future__ import annotations

from xml.sax.saxutils import escape

DEFAULT_JAVA_VERSION = "17"

_POM_TEMPLATE = """\
<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0"
         xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
         xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 http://maven.apache.org/xsd/maven-4.0.0.xsd">
    <modelVersion>4.0.0</modelVersion>

    <groupId>{group_id}</groupId>
    <artifactId>{artifact_id}</artifactId>
    <version>{version}</version>
    <packaging>jar</packaging>

    <properties>
        <maven.compiler.source>{java_version}</maven.compiler.source>
        <maven.compiler.target>{java_version}</maven.compiler.target>
        <project.build.sourceEncoding>UTF-8</project.build.sourceEncoding>
    </properties>

    <dependencies>
    </dependencies>
</project>
"""


def render_pom(
    group_id: str,
    artifact_id: str,
    version: str,
    java_version: str = DEFAULT_JAVA_VERSION,
) -> str:
    return _POM_TEMPLATE.format(
        group_id=escape(group_id),
        artifact_id=escape(artifact_id),
        version=escape(version),
        java_version=escape(java_version),
    )
