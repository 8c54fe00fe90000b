from setuptools import setup, find_packages

# Read long description from README
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="ytfetch",
    version="1.0.0",
    author="ytfetch Contributors",
    description="Download YouTube videos and transcripts via yt-dlp, with plain-text subtitles and ffmpeg compression",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/ytfetch/ytfetch",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Multimedia :: Video",
    ],
    python_requires=">=3.8",
    install_requires=[
        "yt-dlp>=2023.0.0",
        "ffmpeg-python>=0.2.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ytfetch=ytfetch.cli:main",
        ],
    },
    include_package_data=True,
    keywords="youtube yt-dlp ffmpeg subtitles transcripts vtt webvtt",
    project_urls={
        "Bug Reports": "https://github.com/ytfetch/ytfetch/issues",
        "Source": "https://github.com/ytfetch/ytfetch",
    },
)
