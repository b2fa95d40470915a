#!/usr/bin/env python

from setuptools import setup, find_packages

setup(
    name="AccessLogMonitor",
    version="1.0",
    description="Monitor HTTP access logs for the most visited sections, and get alerted on traffic spikes.",
    packages=find_packages(include=["AccessLogMonitor", "AccessLogMonitor.*"]),
    python_requires=">=3.8",
    install_requires=["sortedcontainers"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["access-log-monitor=AccessLogMonitor.__main__:main"]
    },
)
