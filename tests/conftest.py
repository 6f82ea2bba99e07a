"""Shared fixtures describing a small documentation site on disk.

The ``site_root`` fixture writes a content tree modelled on the Terra3
documentation: a home page with hero/features front-matter, three guide
pages, a relative image, a public logo, and a ``.sitepress/config.yaml``
with a base path, sidebar, nav, edit link, footer and social links.
"""

from __future__ import annotations

import typing as typ

import pytest

from sitepress.config import load_site_config

if typ.TYPE_CHECKING:
    from pathlib import Path

    from sitepress.config import SiteConfig

BASE = "/terraform-aws-terra3/"

SITE_CONFIG = """
title: Terra3
base: /terraform-aws-terra3/
description: Documentation for Terra3.
lastUpdated: false
lang: en-US
themeConfig:
  socialLinks:
    - icon: github
      link: https://github.com/it-objects/terraform-aws-terra3
  editLink:
    pattern: https://github.com/it-objects/terraform-aws-terra3/edit/main/gh-pages/docs/:path
    text: Edit this page on GitHub
  footer:
    message: Released under the Apache2 License.
    copyright: Copyright © 2022 it-objects GmbH
  nav:
    - text: IT-Objects
      link: https://www.it-objects.de/cloud/
  sidebar:
    - text: Guide
      collapsible: true
      items:
        - text: Introduction
          link: /introduction
        - text: Getting Started
          link: /getting-started
"""

INDEX_PAGE = """---
layout: home
title: Terra3
titleTemplate: Terraform module for quickly ramping-up 3-tier solutions in AWS
hero:
  name: Terra3
  tagline: An opinionated Terraform module
  image:
    src: /logo.png
    alt: Logo
  actions:
    - theme: brand
      text: Get Started!
      link: /overview
    - theme: alt
      text: View on GitHub
      link: https://github.com/it-objects/terraform-aws-terra3
features:
  - title: Quick and easy
    details: Get started with a 3-tier-architecture in AWS in minutes
---
"""

OVERVIEW_PAGE = """# Overview

Welcome to Terra3. Read the [introduction](/introduction) first, then
[get started](./getting-started.md#prerequisites). The
[same introduction](/terraform-aws-terra3/introduction.html) is linked again.
Everything runs on [AWS](https://aws.amazon.com/).

## What is Terra3

![](./images/diagram.png)

### Architecture

Details about the architecture.

## Motivation

Coming soon

## What can I do with this solution?

You can use it.
"""

INTRODUCTION_PAGE = """# Introduction

Terra3 bootstraps a 3-tier architecture.

## Prerequisites

An AWS account.
"""

GETTING_STARTED_PAGE = """# Getting Started

## Prerequisites

Install Terraform.
"""

DIAGRAM_BYTES = b"\x89PNG fake architecture diagram"
LOGO_BYTES = b"\x89PNG fake logo"


def write_page(root: Path, relative_path: str, text: str) -> Path:
    """Write a content page below ``root`` and return its path."""
    path = root / relative_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def site_root(tmp_path: Path) -> Path:
    """Write the sample content tree and return its root."""
    root = tmp_path / "docs"
    write_page(root, ".sitepress/config.yaml", SITE_CONFIG.lstrip())
    write_page(root, "index.md", INDEX_PAGE)
    write_page(root, "overview.md", OVERVIEW_PAGE)
    write_page(root, "introduction.md", INTRODUCTION_PAGE)
    write_page(root, "getting-started.md", GETTING_STARTED_PAGE)
    (root / "images").mkdir()
    (root / "images" / "diagram.png").write_bytes(DIAGRAM_BYTES)
    (root / "public").mkdir()
    (root / "public" / "logo.png").write_bytes(LOGO_BYTES)
    return root


@pytest.fixture
def site_config(site_root: Path) -> SiteConfig:
    """Load the sample site configuration."""
    return load_site_config(site_root / ".sitepress" / "config.yaml")
