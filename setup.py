from setuptools import setup

version = '1.0'

install_requires = [
    # -*- Extra requirements: -*-
    "numpy",
    ]

tests_require = [
    "pytest",
    ]

setup(name='pyschematic',
      version=version,
      description="Python library for reading and writing schematic files",
      long_description=open("./README.txt", "r").read(),
      # Get strings from http://pypi.python.org/pypi?%3Aaction=list_classifiers
      classifiers=[
          "Development Status :: 4 - Beta",
          "Intended Audience :: Developers",
          "Natural Language :: English",
          "Operating System :: OS Independent",
          "Programming Language :: Python :: 3",
          "Topic :: Utilities",
          "License :: OSI Approved :: MIT License",
          ],
      keywords='minecraft schematic nbt',
      license='MIT License',
      packages=["pyschematic"],
      include_package_data=True,
      zip_safe=False,
      python_requires=">=3.6",
      install_requires=install_requires,
      extras_require={"test": tests_require},
      )
