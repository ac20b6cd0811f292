import sys, traceback, requests
from . import param

def log(config, *args, **kwargs):
  """Write a diagnostic line to the configured sink, if any"""
  sink = getattr(config, 'log', None)
  if sink is None:
    return
  print(*args, file=sink, **kwargs)

# Utility functions for debugging
# we have to be extra defensive in order not to erase the original exception
# with one generated in this function
# the argument 'black_list' is a list of variable names that we don't want
# to see when we display the local variable dictionary.
def print_stack(config, black_list=[]):
  sink = getattr(config, 'log', None)
  if sink is None:
    return
  e = sys.exc_info()
  print('#' * 10, 'BEGIN', '#' * 60, file=sink)
  print(str(e[0]) +':', e[1], file=sink)
  if e[1] != None:
    traceback.print_exc(None, sink)
    t = e[2]
    if t != None:
      while t.tb_next != None:
        t = t.tb_next
      print('-' * 10, 'local variables:', '-' * 50, file=sink)
      for var_name, var_value in list(t.tb_frame.f_locals.items()):
        if var_name not in black_list:
          print(var_name, ':', repr(var_value), file=sink)
    del t
  # to help the garbage collector
  del e
  print('#' * 10, 'END', '#' * 63, file=sink)

def GET(url, config=None, **kwargs):
  """Fetch a URL with our user agent and timeout, returns the response"""
  config = config or param.Config()
  headers = {'User-Agent': config.user_agent}
  headers.update(kwargs.pop('headers', None) or {})
  with requests.Session() as s:
    return s.get(url, headers=headers, timeout=config.http_timeout, **kwargs)
