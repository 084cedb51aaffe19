from setuptools import setup, find_packages
import os


def package_files(package_dir, subdirectory):
    # walk the input package_dir/subdirectory
    # return a package_data list
    paths = []
    directory = os.path.join(package_dir, subdirectory)
    for (path, directories, filenames) in os.walk(directory):
        for filename in filenames:
            path = path.replace(package_dir + "/", "")
            paths.append(os.path.join(path, filename))
    return paths


data_files = package_files(os.path.join("src", "sky_imager"), "config")

setup_args = {
    "name": "sky_imager",
    "author": "HERA Team",
    "url": "https://github.com/HERA-Team/sky_imager",
    "license": "BSD",
    "description": "rasterize point and Gaussian sky components onto radio image cubes.",
    "package_dir": {"": "src"},
    "packages": find_packages("src"),
    "include_package_data": True,
    "python_requires": ">=3.8",
    "install_requires": [
        "numpy>=1.14",
        "scipy",
        "astropy",
        "pyyaml",
        "cached_property",
        "pyradiosky",
    ],
    "extras_require": {
        "tests": ["pytest"],
    },
    "version": "0.1.0",
    "package_data": {"sky_imager": data_files},
    "zip_safe": False,
}


if __name__ == "__main__":
    setup(*(), **setup_args)
