print('  ' + input() + '  ')
print()
