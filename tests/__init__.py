"""The tests package for the text_image_generator project.

The tests are written with `pytest`, mixing plain test functions and
`unittest.TestCase` classes, and cover the random distributions, the
projective geometry, the image degradations, the Poisson solver, the
compositing, the configuration and the batch command line tool.
"""
