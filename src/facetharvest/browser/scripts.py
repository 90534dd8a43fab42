# In-page snippets passed to PageDriver.evaluate. Each takes one argument.

SCROLL_TO_END_SCRIPT = """
(selector) => {
  const el = document.querySelector(selector);
  if (!el) return null;
  el.scrollTop = el.scrollHeight;
  return el.scrollHeight;
}
"""

OUTER_HTML_SCRIPT = """
(selector) => {
  const el = document.querySelector(selector);
  return el ? el.outerHTML : "";
}
"""

SET_VALUE_SCRIPT = """
({ selector, value }) => {
  const el = document.querySelector(selector);
  if (!el) return false;
  el.value = value;
  return true;
}
"""

CLICK_SCRIPT = """
(selector) => {
  const el = document.querySelector(selector);
  if (!el) return false;
  el.click();
  return true;
}
"""
